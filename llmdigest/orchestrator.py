"""
Extraction Orchestrator - single entry point for share URL extraction.

Flow:
1. Detect the platform from the URL
2. Validate the URL against that platform's strict shape
3. Dispatch to the platform's extractor
4. Wrap the outcome with timing and method metadata

extract_conversation never raises; every failure comes back as an
ExtractionResult with success=False.
"""

import logging
import time
from typing import Mapping

from .errors import ErrorCode
from .models import ExtractionMetadata, ExtractionResult
from .platform_extractors import PlatformExtractor, get_extractor
from .platforms import Platform, detect_platform, get_method_for_platform, get_platform_config

logger = logging.getLogger(__name__)


def _elapsed_ms(started: float) -> int:
    return int((time.perf_counter() - started) * 1000)


def _failure(
    error: str,
    code: ErrorCode,
    started: float,
    platform: Platform | None = None,
    method: str = "unknown",
) -> ExtractionResult:
    return ExtractionResult(
        success=False,
        error=error,
        error_code=code,
        platform=platform,
        metadata=ExtractionMetadata(
            extraction_time=_elapsed_ms(started),
            method=method,
            message_count=0,
        ),
    )


async def extract_conversation(
    url: str,
    extractors: Mapping[Platform, PlatformExtractor] | None = None,
) -> ExtractionResult:
    """
    Extract a normalized conversation from a share URL.

    Args:
        url: Public share URL from any supported platform
        extractors: Optional per-platform extractor instances overriding the
            static platform map (used to inject clients and drivers)

    Returns:
        ExtractionResult with the conversation or an error, plus metadata
    """
    started = time.perf_counter()

    try:
        detection = detect_platform(url)
        if not detection.success or detection.platform is None:
            code = ErrorCode.INVALID_URL if not url or not isinstance(url, str) else ErrorCode.UNSUPPORTED_PLATFORM
            logger.info(f"Platform detection failed for {url!r}: {detection.error}")
            return _failure(detection.error or "Unsupported platform URL format", code, started)

        platform = detection.platform
        platform_config = get_platform_config(platform)
        method = get_method_for_platform(platform)

        if extractors is not None and platform in extractors:
            extractor = extractors[platform]
        else:
            extractor = get_extractor(platform)

        if extractor is None:
            return _failure(
                f"Platform {platform.value} is not yet supported",
                ErrorCode.NOT_IMPLEMENTED,
                started,
                platform=platform,
            )

        if not extractor.is_valid_url(url):
            return _failure(
                f"Invalid {platform_config.name} URL format",
                ErrorCode.INVALID_URL_FORMAT,
                started,
                platform=platform,
                method=method,
            )

        logger.info(f"Extracting {platform.value} conversation via {method}: {url}")
        result = await extractor.parse(url)

        if not result.success or result.conversation is None:
            return _failure(
                result.error or "Extraction failed",
                result.code or ErrorCode.UNKNOWN_ERROR,
                started,
                platform=platform,
                method=method,
            )

        conversation = result.conversation
        elapsed = _elapsed_ms(started)
        logger.info(f"Extracted {len(conversation.messages)} {platform.value} messages in {elapsed}ms")

        return ExtractionResult(
            success=True,
            conversation=conversation,
            platform=platform,
            metadata=ExtractionMetadata(
                extraction_time=elapsed,
                method=method,
                message_count=len(conversation.messages),
            ),
        )

    except Exception as e:
        logger.error(f"Unexpected error extracting {url!r}: {e}")
        return _failure(f"Extraction failed: {e}", ErrorCode.UNKNOWN_ERROR, started)
