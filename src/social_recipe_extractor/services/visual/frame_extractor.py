"""Stage A: sample still frames from a cooking video.

The video is downloaded with yt-dlp into a temporary directory, its
duration probed with ffprobe, and each sampled frame grabbed with ffmpeg
as PNG bytes. The temporary directory is removed whatever the outcome.
"""

from __future__ import annotations

import asyncio
import math
import tempfile
from pathlib import Path

from social_recipe_extractor.core.config.settings import FrameSamplingSettings
from social_recipe_extractor.observability.logging import get_logger
from social_recipe_extractor.services.visual.exceptions import FrameExtractionError
from social_recipe_extractor.services.visual.models import (
    ExtractedFrame,
    FrameExtractionResult,
)


logger = get_logger(__name__)

INTRO_POINTS = (0.05, 0.10)
COOKING_POINTS = (0.25, 0.40, 0.55, 0.70)
OUTRO_POINTS = (0.85, 0.95)
EXTENDED_POINTS = (0.02, 0.05, 0.10, 0.20, 0.30, 0.40, 0.50, 0.60, 0.70, 0.80, 0.90, 0.95)

SHORT_VIDEO_SECONDS = 60.0
MEDIUM_VIDEO_SECONDS = 180.0
END_MARGIN_SECONDS = 1.0
END_MARGIN_RATIO = 0.02

_TRANSIENT_MARKERS = ("timed out", "timeout", "connection", "temporarily", "429", "503")


def generate_timestamps(duration: float, max_frames: int = 8) -> list[float]:
    """Pick frame timestamps (seconds) for a video of the given duration.

    Short videos (<= 60s) get intro, early cooking and outro points, medium
    videos (<= 180s) get all eight stage points, and longer ones use a denser
    spread. Timestamps are floored to 0.1s, kept strictly inside
    ``(0, duration - margin)`` where the margin is ``min(1s, 2% of duration)``,
    deduplicated, sorted and evenly thinned down to ``max_frames``.
    """
    if duration <= 0 or max_frames <= 0:
        return []

    if duration <= SHORT_VIDEO_SECONDS:
        points = (*INTRO_POINTS, *COOKING_POINTS[:2], *OUTRO_POINTS)
    elif duration <= MEDIUM_VIDEO_SECONDS:
        points = (*INTRO_POINTS, *COOKING_POINTS, *OUTRO_POINTS)
    else:
        points = EXTENDED_POINTS

    upper = duration - min(END_MARGIN_SECONDS, duration * END_MARGIN_RATIO)
    timestamps = sorted(
        {
            ts
            for ts in (math.floor(duration * point * 10) / 10 for point in points)
            if 0 < ts < upper
        }
    )

    if len(timestamps) <= max_frames:
        return timestamps
    if max_frames == 1:
        return timestamps[:1]

    last = len(timestamps) - 1
    return [timestamps[round(i * last / (max_frames - 1))] for i in range(max_frames)]


def format_timestamp(seconds: float) -> str:
    """Seconds as ``HH:MM:SS.mmm`` for ffmpeg's ``-ss``."""
    millis = round(seconds * 1000)
    hours, millis = divmod(millis, 3_600_000)
    minutes, millis = divmod(millis, 60_000)
    secs, millis = divmod(millis, 1000)
    return f"{hours:02d}:{minutes:02d}:{secs:02d}.{millis:03d}"


class FrameExtractor:
    """Downloads a video and samples frames from it.

    Example:
        ```python
        extractor = FrameExtractor(settings.visual.frames)
        result = await extractor.extract_frames(content.video_url)
        ```
    """

    def __init__(self, settings: FrameSamplingSettings | None = None) -> None:
        self.settings = settings or FrameSamplingSettings()

    async def extract_frames(self, video_url: str) -> FrameExtractionResult:
        """Sample up to ``max_frames`` frames from a video.

        Raises:
            FrameExtractionError: If the download fails or no usable frame
                could be grabbed.
        """
        with tempfile.TemporaryDirectory(
            prefix="social-recipe-", dir=self.settings.temp_dir
        ) as workdir:
            video_path = Path(workdir) / "video.mp4"
            await self.download_video(video_url, video_path)

            duration = await self.probe_duration(video_path)
            timestamps = generate_timestamps(duration, self.settings.max_frames)

            frames: list[ExtractedFrame] = []
            for timestamp in timestamps:
                data = await self.extract_frame(video_path, timestamp)
                if data is None or len(data) < self.settings.min_frame_size:
                    logger.debug(
                        "Dropping empty frame",
                        timestamp=timestamp,
                        size=0 if data is None else len(data),
                    )
                    continue
                frames.append(
                    ExtractedFrame(index=len(frames), timestamp=timestamp, data=data)
                )

        if not frames:
            raise FrameExtractionError(
                video_url,
                f"no usable frames at {len(timestamps)} timestamps",
                is_retryable=False,
            )

        logger.info(
            "Frames extracted",
            video_url=video_url,
            duration=duration,
            requested=len(timestamps),
            extracted=len(frames),
        )
        return FrameExtractionResult(
            frames=frames,
            video_duration=duration,
            requested_timestamps=timestamps,
        )

    async def download_video(self, video_url: str, destination: Path) -> None:
        """Download a video with yt-dlp.

        Raises:
            FrameExtractionError: On a non-zero exit, a timeout or a missing
                output file.
        """
        command = [
            self.settings.yt_dlp_path,
            "--format",
            "best[ext=mp4]/best",
            "--output",
            str(destination),
            "--force-overwrites",
            "--no-playlist",
            "--quiet",
            video_url,
        ]
        try:
            returncode, _, stderr = await self._run(
                command, self.settings.download_timeout
            )
        except TimeoutError as e:
            raise FrameExtractionError(
                video_url, "video download timed out", is_retryable=True
            ) from e
        except OSError as e:
            raise FrameExtractionError(
                video_url, f"yt-dlp could not be started: {e}", is_retryable=False
            ) from e

        if returncode != 0:
            message = stderr.decode(errors="replace").strip() or f"exit code {returncode}"
            retryable = any(marker in message.lower() for marker in _TRANSIENT_MARKERS)
            raise FrameExtractionError(
                video_url, f"video download failed: {message}", is_retryable=retryable
            )
        if not destination.exists():
            raise FrameExtractionError(video_url, "downloaded video file not found")

    async def probe_duration(self, video_path: Path) -> float:
        """Video duration in seconds, or the configured default if probing fails."""
        command = [
            self.settings.ffprobe_path,
            "-v",
            "error",
            "-show_entries",
            "format=duration",
            "-of",
            "default=noprint_wrappers=1:nokey=1",
            str(video_path),
        ]
        try:
            returncode, stdout, _ = await self._run(command, self.settings.probe_timeout)
            if returncode != 0:
                msg = f"ffprobe exit code {returncode}"
                raise ValueError(msg)
            duration = float(stdout.decode().strip())
        except (OSError, TimeoutError, ValueError) as e:
            logger.warning(
                "Duration probe failed, using default",
                error=str(e),
                default=self.settings.default_duration,
            )
            return self.settings.default_duration

        if duration <= 0 or math.isnan(duration):
            return self.settings.default_duration
        return duration

    async def extract_frame(self, video_path: Path, timestamp: float) -> bytes | None:
        """Grab a single frame as PNG bytes; None if ffmpeg produced nothing."""
        command = [
            self.settings.ffmpeg_path,
            "-ss",
            format_timestamp(timestamp),
            "-i",
            str(video_path),
            "-frames:v",
            "1",
            "-f",
            "image2pipe",
            "-vcodec",
            "png",
            "-q:v",
            "2",
            "-y",
            "pipe:1",
        ]
        try:
            returncode, stdout, stderr = await self._run(
                command, self.settings.frame_timeout
            )
        except (OSError, TimeoutError) as e:
            logger.warning("Frame grab failed", timestamp=timestamp, error=str(e))
            return None

        if returncode != 0 or not stdout:
            logger.warning(
                "Frame grab produced no image",
                timestamp=timestamp,
                returncode=returncode,
                stderr=stderr.decode(errors="replace")[-200:],
            )
            return None
        return stdout

    @staticmethod
    async def _run(command: list[str], timeout: float) -> tuple[int, bytes, bytes]:
        """Run a command, killing it if it outlives ``timeout`` seconds.

        Raises:
            TimeoutError: If the command timed out.
            OSError: If the executable could not be started.
        """
        process = await asyncio.create_subprocess_exec(
            *command,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(process.communicate(), timeout)
        except TimeoutError:
            process.kill()
            await process.wait()
            raise
        return process.returncode or 0, stdout, stderr
