"""
Bolivia CPI Exceptions
パッケージ共通の例外
"""


class CPIError(Exception):
    """パッケージの基底例外"""


class CPIDataError(CPIError):
    """どの都市からも指数を算出できなかった場合のエラー"""

    def __init__(self, messages=None):
        self.messages = list(messages or [])
        detail = " ".join(self.messages) or "Check network/console."
        super().__init__(f"Failed to process any city data. {detail}")
