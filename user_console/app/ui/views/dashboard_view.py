from user_console.app.navigation_shell import NavRoute


class DashboardView:
    def render(self, routes: list[NavRoute]) -> str:
        print("\n=== User console ===")
        options = [route for route in routes if route.path != "/dashboard"]
        for index, route in enumerate(options, start=1):
            print(f"  {index}. {route.label}")
        print("  l. Logout")
        print("  0. Exit")
        option = input("Option: ").strip().lower()
        if option.isdigit() and 0 < int(option) <= len(options):
            return options[int(option) - 1].path
        return option
