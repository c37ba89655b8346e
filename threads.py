from dataclasses import dataclass, field
from typing import Optional
from config import RECENT_REPLIES_LIMIT
from replies import Reply, passwords_match
from utils import timestamp


@dataclass(slots=True)
class Thread:
    thread_id: str
    board: str
    text: str
    delete_password: str
    created_on: float = field(default_factory=timestamp)
    bumped_on: Optional[float] = None
    reported: bool = False
    replies: list[Reply] = field(default_factory=list)

    def __post_init__(self) -> None:
        # a thread without replies was last active when it was created
        if self.bumped_on is None:
            self.bumped_on = self.created_on

    def __str__(self) -> str:
        reported_marker = " [REPORTED]" if self.reported else ""
        return f"Thread {self.thread_id} on /{self.board}/: {self.text[:50]}{reported_marker}"

    def check_password(self, password: str) -> bool:
        return passwords_match(self.delete_password, password)

    def find_reply(self, reply_id: str) -> Optional[Reply]:
        for reply in self.replies:
            if reply.reply_id == reply_id:
                return reply
        return None

    def recent_replies(self, limit: int = RECENT_REPLIES_LIMIT) -> list[Reply]:
        """Return the last ``limit`` replies, oldest first."""
        if limit <= 0:
            return []
        return self.replies[-limit:]
