class ErrorBanner:
    @staticmethod
    def show(message: str, title: str = "Error") -> None:
        lines = message.splitlines() or [message]
        print(f"[{title.upper()}] {lines[0]}")
        for line in lines[1:]:
            print(f"        {line}")
