from lodgetix.platform.logging.loguru_io import Logger


class MockEmailSender:
    """Logs outgoing auth emails instead of delivering them"""

    async def send_one_time_password(self, *, email: str, code: str, redirect_to: str) -> None:
        Logger.base.info(
            f'📧 [MAIL] One-time passcode for {email}: {code} (redirect {redirect_to})'
        )
