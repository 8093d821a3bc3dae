"""
motivate feedback

Tell the backend whether you liked an image. Without --id, feedback is sent for every image in the
stream that has a backend id; images from your own files have none and are skipped. Each call
counts once, so running the same command twice counts twice.
"""

import click

from motivate.cli_utils.utils import current_app
from motivate.cli_utils.decorators import callback
from motivate.cli_utils.decorators import catch_errors
from motivate.cli_utils.console import confirm_success
from motivate.cli_utils.console import warn

from motivate.feedback import FeedbackKind
from motivate.MotivateStream import MotivateStream


def _send(kind: str, image_id: int):
    current_app().feedback.submit(image_id, kind)
    emoji = ":thumbs_up-emoji:" if kind == FeedbackKind.LIKE.value else ":thumbs_down-emoji:"
    confirm_success(f"{emoji} 'feedback' sent '{kind}' for image {image_id}")


@click.command(name="feedback")
@click.option("--like", "kind", flag_value=FeedbackKind.LIKE.value, help="Send a like.")
@click.option("--dislike", "kind", flag_value=FeedbackKind.DISLIKE.value, help="Send a dislike.")
@click.option("--id", "image_id", type=int, help="Send feedback for this image id instead of the stream.")
@callback
@catch_errors
def cli(stream: MotivateStream, kind: str = None, image_id: int = None):
    """
    Like or dislike images, e.g. random show feedback --like
    """

    if kind is None:
        raise click.UsageError("'feedback' needs --like or --dislike.")

    if image_id is not None:
        _send(kind, image_id)
        return stream

    @catch_errors
    def _feedback(image):
        if image.image_id is None:
            warn("'feedback' skipped an image with no backend id")
        else:
            _send(kind, image.image_id)
        return image

    stream.stream = (_feedback(image) for image in stream.stream)
    return stream
