"""Upload ingest pipeline.

One ``UploadPipeline.run`` call handles one request: it decodes the
multipart body as it arrives, and for every file part stages the bytes while
hashing them, derives the content name and commits the staged file into the
store before the next part is read. The result is the request's name map
(store name -> original filename).

The first failure aborts the request. Parts committed before the failure
stay in the store; there is no rollback.
"""
from __future__ import annotations

import asyncio
import enum
import logging
from typing import Callable

from starlette.requests import Request

from .core.config import Settings
from .formstream import BodyPart, MultipartReader
from .naming import derive_name, file_extension, random_prefix
from .schemas import NameMap, StoreEntry
from .storage import StagedFile, commit, copy_from, open_staged

logger = logging.getLogger("hashdrop.pipeline")


class PipelineState(str, enum.Enum):
    READING_PARTS = "reading_parts"
    STAGING = "staging"
    HASHING = "hashing"
    COMMITTING = "committing"
    DONE = "done"
    ABORTED = "aborted"


class UploadPipeline:
    """Stage, hash, name and commit every file part of one request."""

    def __init__(self, settings: Settings, prefix_factory: Callable[[int], str] = random_prefix) -> None:
        self.settings = settings
        self.prefix_factory = prefix_factory
        self.state = PipelineState.READING_PARTS

    def _enter(self, state: PipelineState) -> None:
        logger.debug("pipeline %s -> %s", self.state.value, state.value)
        self.state = state

    async def run(self, request: Request) -> NameMap:
        files: NameMap = {}
        try:
            reader = MultipartReader.from_content_type(request.headers.get("content-type", ""), request.stream())
            while True:
                part = await reader.next_part()
                if part is None:
                    break
                if not part.filename:
                    continue  # plain form field or empty file input
                entry = await self.ingest_part(part)
                files[entry.name] = part.filename
                self._enter(PipelineState.READING_PARTS)
        except (Exception, asyncio.CancelledError):
            self._enter(PipelineState.ABORTED)
            raise

        self._enter(PipelineState.DONE)
        return files

    async def ingest_part(self, part: BodyPart) -> StoreEntry:
        """Stage, hash and commit a single file part."""
        settings = self.settings
        original = part.filename or ""

        self._enter(PipelineState.STAGING)
        staged = open_staged(
            settings.tmp_dir,
            self.prefix_factory(settings.rand_prefix),
            original,
            settings.hash_algorithm,
        )
        try:
            self._enter(PipelineState.HASHING)
            await copy_from(staged, part, chunk_size=settings.chunk_size)
            name = derive_name(
                staged.hasher.finalize(),
                file_extension(original),
                settings.filename_len,
                settings.disallow_chars,
            )

            self._enter(PipelineState.COMMITTING)
            committed = commit(staged, name, settings.store_dir)
        except (Exception, asyncio.CancelledError):
            _discard(staged)
            raise

        if committed.created:
            logger.info("Stored %s as %s (%d bytes)", original, committed.name, staged.bytes_written)
        else:
            logger.info("Deduplicated %s onto existing %s", original, committed.name)
        return committed


def _discard(staged: StagedFile) -> None:
    logger.debug("Discarding staged file %s", staged.path)
    staged.discard()
