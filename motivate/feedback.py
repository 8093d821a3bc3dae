"""
Feedback Submitter

Sends a like/dislike for a shown image. One backend call per submission, no retries, and no
de-duplication: submitting twice counts twice. A failure is logged and raised once to the caller;
it never touches the acquisition path.
"""

import logging
from enum import Enum
from typing import Union

from motivate.backend import BackendClient
from motivate.backend import RemoteError

logger = logging.getLogger(__name__)

FEEDBACK_RPC = "increment_image_feedback_count"


class FeedbackKind(Enum):
    LIKE = "like"
    DISLIKE = "dislike"


class FeedbackError(Exception):
    """Raised when a feedback submission could not be delivered."""

    pass


class FeedbackSubmitter:
    def __init__(self, client: BackendClient):
        self.client = client

    def submit(self, image_id: int, kind: Union[FeedbackKind, str]) -> None:
        try:
            kind = FeedbackKind(kind)
        except ValueError:
            raise ValueError(f"feedback kind must be 'like' or 'dislike', got {kind!r}")

        if isinstance(image_id, bool) or not isinstance(image_id, int):
            raise TypeError(f"image_id must be an int, got {image_id!r}")

        params = {"p_image_id": image_id, "p_feedback_type": kind.value}
        logger.debug("calling %s with %s", FEEDBACK_RPC, params)

        try:
            self.client.rpc(FEEDBACK_RPC, params)

        except RemoteError as error:
            logger.error("feedback %s for image %d failed: %s", kind.value, image_id, error)
            raise FeedbackError(f"could not submit '{kind.value}' for image {image_id}: {error}")

        logger.info("recorded %s for image %d", kind.value, image_id)
