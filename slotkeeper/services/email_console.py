import logging
from typing import Any, Dict, List, Optional

logger = logging.getLogger(__name__)


class ConsoleEmailService:
    """Email provider that logs messages instead of sending them."""

    def __init__(self, from_email: Optional[str] = None) -> None:
        self.from_email = from_email
        self.sent: List[Dict[str, Any]] = []

    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Dict[str, Any]:
        message = {
            "from": self.from_email,
            "to": to_email,
            "subject": subject,
            "html": html_content,
            "text": text_content,
        }
        self.sent.append(message)
        logger.info("[console email] to=%s subject=%s", to_email, subject)
        return {"id": f"console-{len(self.sent)}"}
