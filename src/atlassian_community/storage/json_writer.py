"""JSON file writer for persisting query results."""

import json
import re
from datetime import datetime, timezone
from pathlib import Path

import aiofiles
import structlog
from pydantic import BaseModel

logger = structlog.get_logger()


class JsonWriter:
    """Handles JSON file output for result envelopes."""

    def __init__(self, output_dir: str = "./output"):
        """Initialize JSON writer.

        Args:
            output_dir: Directory for JSON output files
        """
        self.output_dir = Path(output_dir)
        self.output_dir.mkdir(parents=True, exist_ok=True)

    def _sanitize_filename(self, text: str) -> str:
        """Sanitize text for use in filename.

        Args:
            text: Text to sanitize

        Returns:
            Sanitized filename-safe string
        """
        sanitized = re.sub(r"[^\w\-]", "_", text)
        sanitized = re.sub(r"_+", "_", sanitized)
        sanitized = sanitized.strip("_")
        return sanitized[:50] or "results"

    def _generate_filename(self, label: str) -> str:
        timestamp = datetime.now(timezone.utc).strftime("%Y%m%d_%H%M%S")
        return f"{self._sanitize_filename(label)}_{timestamp}.json"

    async def write_envelope(
        self,
        envelope: BaseModel,
        label: str,
        include_raw: bool = False,
    ) -> str:
        """Write a result envelope to a JSON file.

        Args:
            envelope: SearchEnvelope or TagsEnvelope to save
            label: Name used as the filename prefix (search terms, tag, ...)
            include_raw: Keep the upstream payloads in the file

        Returns:
            Path to the saved file
        """
        filepath = self.output_dir / self._generate_filename(label)

        exclude = None if include_raw else {"raw": True, "items": {"__all__": {"raw"}}}
        data = envelope.model_dump(mode="json", exclude=exclude)

        async with aiofiles.open(filepath, "w", encoding="utf-8") as f:
            await f.write(json.dumps(data, indent=2, ensure_ascii=False))

        logger.info("saved_envelope", filepath=str(filepath), label=label)
        return str(filepath)
