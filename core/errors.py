# core/errors.py


class FaucetError(Exception):
    """Помилка, після якої поточний гаманець пропускається."""


class CaptchaError(FaucetError):
    pass


class CaptchaTimeout(CaptchaError):
    def __init__(self, job_id: str, attempts: int):
        super().__init__(f"капча {job_id} не розв'язана після {attempts} спроб")
        self.job_id = job_id
        self.attempts = attempts


class AuthError(FaucetError):
    pass


class RequirementError(FaucetError):
    pass


class UnexpectedFreeDrip(RequirementError):
    """Drip відповів 2xx без оплати замість 402."""

    def __init__(self, status: int, body):
        super().__init__(f"очікували 402, отримали {status}: {body}")
        self.status = status
        self.body = body
