"""
Job poller: submit / poll / download protocol for asynchronous providers.

Video and music providers accept a job, hand back an identifier and finish
the work later. JobPoller drives any JobProviderClient through that
protocol:

    submit -> SUBMITTED
    poll every ``poll_interval`` seconds, at most ``max_attempts`` times
        QUEUED / RUNNING / unknown status  -> keep polling
        COMPLETED + result URL             -> download bytes
        FAILED                             -> GenerationFailedError
    budget exhausted                       -> PollTimeoutError (TIMED_OUT)

Downloads are attempted exactly once. Polling uses a constant interval.
"""

import asyncio
import logging
from typing import Any

from tenacity import (
    AsyncRetrying,
    RetryError,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from stitchup.config import Settings
from stitchup.models.schemas import GenerationJob, JobStatus
from stitchup.services.providers.base import (
    GenerationFailedError,
    JobProviderClient,
    MissingJobIdentifierError,
    MissingResultLocationError,
    PollTimeoutError,
    ProviderError,
)
from stitchup.utils.field_extraction import first_match

logger = logging.getLogger(__name__)

# Poll responses with these statuses are treated as "not ready yet"
TRANSIENT_POLL_STATUSES = frozenset({404, 408, 425, 429})


class _JobPending(Exception):
    """Job has not reached a terminal state; poll again."""


class JobPoller:
    """
    Drives one provider job from submission to downloaded bytes.

    Example:
        async with RunwayClient.from_settings(settings) as client:
            poller = JobPoller.from_settings(client, settings)
            video = await poller.run(client.build_payload(image_bytes, "Storm at sea"))
    """

    def __init__(
        self,
        provider: JobProviderClient,
        poll_interval: float = 5.0,
        max_attempts: int = 60,
    ):
        """
        Args:
            provider: Adapter supplying endpoints and extraction paths
            poll_interval: Seconds between status queries
            max_attempts: Maximum number of status queries
        """
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.provider = provider
        self.poll_interval = poll_interval
        self.max_attempts = max_attempts

    @classmethod
    def from_settings(cls, provider: JobProviderClient, settings: Settings) -> "JobPoller":
        return cls(
            provider,
            poll_interval=settings.poll_interval,
            max_attempts=settings.max_poll_attempts,
        )

    async def run(self, payload: dict[str, Any]) -> bytes:
        """
        Submit a job, wait for it and download the result.

        Args:
            payload: Provider-specific request body

        Returns:
            Result bytes

        Raises:
            ProviderError: Or any subclass, see module docstring
        """
        job = await self.submit(payload)
        location = await self.wait_for_result(job)
        logger.info(f"{self.provider.provider} job {job.job_id}: downloading {location}")
        return await self.provider.download(location)

    async def submit(self, payload: dict[str, Any]) -> GenerationJob:
        """
        Submit a job and extract its identifier.

        Raises:
            ProviderError: Non-success status or in-band error field
            MalformedResponseError: Unparseable body
            MissingJobIdentifierError: No job id under any known path
        """
        raw = await self.provider.submit(payload)
        name = self.provider.provider

        error = first_match(raw, self.provider.ERROR_PATHS)
        if error:
            raise ProviderError(f"{name} rejected the job: {error}", provider=name)

        job_id = first_match(raw, self.provider.JOB_ID_PATHS)
        if not job_id:
            raise MissingJobIdentifierError(
                f"{name} submission response has no job id "
                f"(looked for {', '.join(self.provider.JOB_ID_PATHS)})",
                provider=name,
                response_body=str(raw)[:2000],
            )

        job = GenerationJob(
            job_id=job_id,
            provider=name,
            status_url=self.provider.status_url(job_id),
        )
        logger.info(f"{name} job submitted: {job_id}")
        return job

    async def wait_for_result(self, job: GenerationJob) -> str:
        """
        Poll until the job completes and return its result URL.

        Raises:
            GenerationFailedError: Provider reported failure
            MissingResultLocationError: Completed without a result URL
            PollTimeoutError: No terminal state within max_attempts
        """
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_fixed(self.poll_interval),
            retry=retry_if_exception_type(_JobPending),
        )

        await asyncio.sleep(self.poll_interval)
        try:
            async for attempt in retrying:
                with attempt:
                    location = await self._poll_once(job)
        except RetryError as e:
            job.advance(JobStatus.TIMED_OUT)
            logger.error(f"{job.provider} job {job.job_id} timed out after {job.attempts} polls")
            raise PollTimeoutError(
                f"{job.provider} job {job.job_id} did not finish after {job.attempts} polls",
                provider=job.provider,
            ) from e

        return location

    async def _poll_once(self, job: GenerationJob) -> str:
        job.attempts += 1
        response = await self.provider.get_status(job.status_url)

        if response.status_code == 404 and job.attempts == 1:
            alternate = self.provider.alternate_status_url(job.job_id)
            if alternate and alternate != job.status_url:
                logger.info(f"{job.provider} job {job.job_id}: status 404, switching to {alternate}")
                job.status_url = alternate
                raise _JobPending()

        if not response.is_success:
            if response.status_code in TRANSIENT_POLL_STATUSES or response.status_code >= 500:
                logger.warning(
                    f"{job.provider} job {job.job_id}: poll {job.attempts} "
                    f"returned HTTP {response.status_code}"
                )
                raise _JobPending()
            self.provider.raise_for_status(response, "status poll")

        raw = self.provider.parse_json(response)
        raw_status = first_match(raw, self.provider.STATUS_PATHS)
        status = self.provider.map_status(raw_status)
        if status is None:
            logger.debug(f"{job.provider} job {job.job_id}: status {raw_status!r} treated as running")
            status = JobStatus.RUNNING

        if job.advance(status):
            logger.info(f"{job.provider} job {job.job_id}: {status.value} (poll {job.attempts})")

        if status == JobStatus.COMPLETED:
            location = first_match(raw, self.provider.RESULT_PATHS)
            if not location:
                raise MissingResultLocationError(
                    f"{job.provider} job {job.job_id} completed without a result URL",
                    provider=job.provider,
                    response_body=response.text[:2000],
                )
            job.result_location = location
            return location

        if status == JobStatus.FAILED:
            message = first_match(raw, self.provider.ERROR_PATHS) or "unknown error"
            job.error_message = message
            logger.error(f"{job.provider} job {job.job_id} failed: {message}")
            raise GenerationFailedError(message, provider=job.provider)

        raise _JobPending()
