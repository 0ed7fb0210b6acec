"""Image puller with bounded retry."""

import logging
import time
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Union

from uds.errors import PullFailed, RuntimeCommandError
from uds.models.deployment import image_reference
from uds.providers.base import ContainerRuntime
from uds.utils.parsing import parse_list
from uds.utils.retry import RetryDecision, RetryError, RetryPolicy


logger = logging.getLogger(__name__)

CONNECTION_REFUSED_DELAY = 5.0
DEFAULT_DELAY = 3.0
NOT_FOUND_MARKERS = ("not found", "manifest unknown", "repository does not exist")


def first_error_line(output: str) -> str:
    """First line mentioning an error, or the whole output."""
    for line in output.splitlines():
        if "error" in line.lower():
            return line.strip()
    return output.strip()


def classify_pull_error(error: Exception) -> RetryDecision:
    """Decide whether a failed pull is worth retrying."""
    text = getattr(error, "output", "") or str(error)
    lowered = text.lower()
    if "connection refused" in lowered:
        return RetryDecision(retry=True, delay=CONNECTION_REFUSED_DELAY, reason="Docker daemon connection refused")
    if any(marker in lowered for marker in NOT_FOUND_MARKERS):
        return RetryDecision(retry=False, reason="image not found in registry")
    return RetryDecision(retry=True, delay=DEFAULT_DELAY, reason=first_error_line(text))


@dataclass
class PullSummary:
    """Outcome of pulling a set of images."""
    requested: List[str] = field(default_factory=list)
    pulled: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)
    skipped: bool = False

    @property
    def complete(self) -> bool:
        """Whether every requested image was pulled."""
        return not self.failed


class ImagePuller:
    """Pulls images through a container runtime."""

    def __init__(
        self,
        runtime: ContainerRuntime,
        max_attempts: int = 3,
        sleep: Callable[[float], None] = time.sleep,
    ):
        """Initialize image puller."""
        self.runtime = runtime
        self.policy = RetryPolicy(
            max_attempts=max_attempts,
            classify=classify_pull_error,
            sleep=sleep,
            retry_on=(RuntimeCommandError,),
        )

    def pull_with_retry(self, image: str, tag: str, max_attempts: Optional[int] = None) -> str:
        """Pull one image, retrying transient failures.

        Returns the pulled reference. Raises :class:`PullFailed` when the
        attempts run out or the image does not exist.
        """
        reference = image_reference(image, tag)
        policy = self.policy if max_attempts is None else self.policy.with_attempts(max_attempts)

        try:
            policy.run(lambda: self.runtime.pull(reference), description=f"Pull of {reference}")
        except RetryError as e:
            last_error = first_error_line(getattr(e.last_error, "output", "") or str(e.last_error))
            if e.aborted:
                logger.error(f"Image '{reference}' not found in registry")
            else:
                logger.error(f"Failed to pull image {reference} after {e.attempts} attempts: {last_error}")
            raise PullFailed(reference, e.attempts, last_error) from e.last_error

        return reference

    def pull_all(self, images: Union[str, Sequence[str]], tag: str, skip: bool = False) -> PullSummary:
        """Pull every image in ``images``.

        Partial failure is tolerated: the call succeeds when at least one
        image was pulled and logs a warning naming the count.
        """
        if skip:
            logger.info("Skipping Docker image pull as requested")
            return PullSummary(skipped=True)

        references = parse_list(images, "images")
        summary = PullSummary(requested=[image_reference(image, tag) for image in references])
        if not references:
            logger.warning("No image specified, skipping pull")
            return summary

        logger.info("Pulling Docker images...")
        last_failure: Optional[PullFailed] = None
        for image in references:
            logger.info(f"Pulling image: {image_reference(image, tag)}")
            try:
                summary.pulled.append(self.pull_with_retry(image, tag))
            except PullFailed as e:
                summary.failed.append(e.reference)
                last_failure = e

        if not summary.pulled:
            if len(references) == 1:
                raise last_failure
            logger.error("Failed to pull any images")
            raise PullFailed(
                ", ".join(summary.failed),
                last_failure.attempts,
                f"none of {len(references)} images could be pulled; last error: {last_failure.last_error}",
            )

        if summary.failed:
            logger.warning(f"Only pulled {len(summary.pulled)} of {len(references)} images")
        else:
            logger.info("All images pulled successfully")
        return summary
