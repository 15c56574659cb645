import secrets

# No 0/O or 1/I, so codes survive being read aloud
INVITE_ALPHABET = "ABCDEFGHJKLMNPQRSTUVWXYZ23456789"


def generate_invite_code(length: int = 6) -> str:
    return "".join(secrets.choice(INVITE_ALPHABET) for _ in range(length))


def normalize_invite_code(code: str) -> str:
    return (code or "").strip().upper()
