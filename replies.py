import hmac
from dataclasses import dataclass, field
from utils import timestamp
from config import DELETED_REPLY_TEXT


def passwords_match(stored: str, candidate: str) -> bool:
    """Exact comparison of a stored delete password against a candidate."""
    # a candidate may carry unpaired surrogates from a JSON escape; it never matches
    return hmac.compare_digest(stored.encode("utf-8"), candidate.encode("utf-8", "surrogatepass"))


@dataclass(slots=True)
class Reply:
    reply_id: str
    thread_id: str
    text: str
    delete_password: str
    created_on: float = field(default_factory=timestamp)
    reported: bool = False

    @property
    def deleted(self) -> bool:
        return self.text == DELETED_REPLY_TEXT

    def check_password(self, password: str) -> bool:
        return passwords_match(self.delete_password, password)

    def __str__(self) -> str:
        if self.deleted:
            return f"Reply {self.reply_id} (deleted)"
        reported_marker = " [REPORTED]" if self.reported else ""
        return f"Reply {self.reply_id}: {self.text[:50]}{reported_marker}"
