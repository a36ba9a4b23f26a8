"""Artifact publishing: promote the compiler's temp output to its final path."""

import asyncio
import logging
import os
from pathlib import Path

logger = logging.getLogger(__name__)


class ArtifactPublisher:
    """Renames a compile's temp output to its published path.

    With wait_attempts > 0 a missing temp output is re-checked with
    exponential backoff before giving up.
    """

    def __init__(
        self,
        source_root: Path,
        temp_output: str | None,
        final_output: str | None,
        wait_attempts: int = 0,
        wait_delay: float = 0.05,
    ) -> None:
        self.source_root = source_root
        self.temp_output = temp_output
        self.final_output = final_output
        self.wait_attempts = wait_attempts
        self.wait_delay = wait_delay

    @property
    def enabled(self) -> bool:
        return bool(self.temp_output and self.final_output) and self.final_output != self.temp_output

    async def _wait_for(self, path: Path) -> bool:
        delay = self.wait_delay
        for _ in range(self.wait_attempts):
            if path.exists():
                return True
            await asyncio.sleep(delay)
            delay *= 2
        return path.exists()

    async def publish(self) -> Path | None:
        """Rename the temp output over the final output.

        Returns:
            The published path, or None when publishing is not configured

        Raises:
            FileNotFoundError: If the temp output does not exist
        """
        if not self.enabled:
            return None

        source = self.source_root / self.temp_output
        target = self.source_root / self.final_output

        if not await self._wait_for(source):
            raise FileNotFoundError(f"Compiler output not found: {source}")

        target.parent.mkdir(parents=True, exist_ok=True)
        os.replace(source, target)
        logger.debug(f"Published {source} -> {target}")
        return target
