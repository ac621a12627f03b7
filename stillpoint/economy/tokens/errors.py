class TokenLedgerError(Exception):
    pass


class InvalidTokenAmountError(TokenLedgerError):
    pass


class TokenValidationError(TokenLedgerError):
    pass


class InsufficientTokensError(TokenLedgerError):
    def __init__(self, *, current_balance: int, required: int) -> None:
        super().__init__(f"insufficient tokens: balance {current_balance}, required {required}")
        self.current_balance = current_balance
        self.required = required
