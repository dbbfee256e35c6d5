class LoginView:
    def prompt_token(self) -> str:
        return input("Access token (Enter=exit, u=sign up): ").strip()

    def sign_up_notice(self) -> None:
        print("Accounts are issued by the identity provider. Sign up there, then paste the access token here.")
