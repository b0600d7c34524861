"""Analyzer facade: resolve a schema object and assess its safety.

Design:
- The metadata provider is awaited once per call; it is the only suspension
  point besides the index build
- Provider output may be raw dicts; it is validated on every fetch, and a
  payload that fails validation counts as unavailable metadata
- The identifier index is built by a fire-and-forget task when an event loop
  is running at construction, or on an explicit ``rebuild_index()``
- A rebuild swaps the index reference; an analysis reads the reference once,
  so it never sees a partially built index
- ``analyze_object_safety`` never raises: lookup failures and unexpected
  exceptions come back as ``AnalysisResult(found=False, error=...)``
"""

from __future__ import annotations

import asyncio
import contextlib
from enum import Enum

from schemaguard.analysis.foreign_keys import assess_incoming_foreign_keys, find_incoming_foreign_keys
from schemaguard.analysis.models import (
    AnalysisResult,
    ResolvedObject,
    ResolvedRelation,
    ResolvedRoutine,
    ResolvedSchema,
    ResolvedSequence,
    ResolvedType,
    UsageReference,
)
from schemaguard.analysis.risk import assess_object
from schemaguard.config.models import SchemaGuardConfig
from schemaguard.core.errors import AnalysisError, InternalError
from schemaguard.core.logging import get_logger, request_scope
from schemaguard.index.builder import IdentifierIndex, IndexBuildResult, build_index_result
from schemaguard.index.resolver import find_usage, find_usage_fuzzy
from schemaguard.metadata.models import (
    DatabaseMetadata,
    SchemaMetadata,
    coerce_snapshot,
    connected_database,
)
from schemaguard.metadata.provider import MetadataProvider

logger = get_logger(__name__)


class AnalyzerState(Enum):
    """Identifier index lifecycle."""

    UNINITIALIZED = "uninitialized"
    INDEXING = "indexing"
    READY = "ready"


def resolve_object(
    schema: SchemaMetadata,
    schema_name: str,
    object_name: str,
) -> ResolvedObject | None:
    """Find ``object_name`` in a schema: relation, routine, sequence, type, then the schema itself.

    Routines resolve to their first overload. The schema itself matches only
    when ``object_name`` is empty or equals ``schema_name``.
    """
    relation = schema.relations.get(object_name)
    if relation is not None:
        return ResolvedRelation(object_name, schema_name, relation)

    overloads = schema.routines.get(object_name)
    if overloads:
        return ResolvedRoutine(object_name, schema_name, overloads[0])

    sequence = schema.sequences.get(object_name)
    if sequence is not None:
        return ResolvedSequence(object_name, schema_name, sequence)

    type_ = schema.types.get(object_name)
    if type_ is not None:
        return ResolvedType(object_name, schema_name, type_)

    if not object_name or object_name == schema_name:
        return ResolvedSchema(schema_name, schema_name, schema)

    return None


class ObjectSafetyAnalyzer:
    """Answers "how dangerous is it to delete, move or re-own this object?"."""

    def __init__(
        self,
        provider: MetadataProvider,
        *,
        config: SchemaGuardConfig | None = None,
        build_index: bool | None = None,
    ) -> None:
        self._provider = provider
        self._config = config or SchemaGuardConfig()
        self._index = IdentifierIndex.empty()
        self._state = AnalyzerState.UNINITIALIZED
        self._index_task: asyncio.Task[IdentifierIndex] | None = None
        self._last_index_error: str | None = None

        if self._config.index.build_on_start if build_index is None else build_index:
            self._schedule_rebuild()

    # -------------------------------------------------------------------------
    # Index lifecycle
    # -------------------------------------------------------------------------

    @property
    def state(self) -> AnalyzerState:
        return self._state

    @property
    def index(self) -> IdentifierIndex:
        """The index current at the time of access."""
        return self._index

    @property
    def last_index_error(self) -> str | None:
        return self._last_index_error

    def _schedule_rebuild(self) -> None:
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.debug("index_build_deferred", reason="no running event loop")
            return
        self._index_task = loop.create_task(self.rebuild_index())

    async def rebuild_index(self) -> IdentifierIndex:
        """Fetch fresh metadata and replace the index.

        Failures leave an empty index behind and are logged, never raised.
        The analyzer is READY afterwards either way, unless the build is
        cancelled: the previous state is then restored.
        """
        previous = self._state
        self._state = AnalyzerState.INDEXING
        try:
            snapshot = coerce_snapshot(await self._provider.get_metadata())
        except asyncio.CancelledError:
            self._state = previous
            raise
        except Exception as e:
            result = IndexBuildResult(index=IdentifierIndex.empty(), error=str(e))
        else:
            result = build_index_result(snapshot)

        if result.ok:
            logger.info("index_rebuilt", keys=len(result.index), entries=result.index.entry_count)
        else:
            logger.warning("index_rebuild_failed", error=result.error)

        self._index = result.index
        self._last_index_error = result.error
        self._state = AnalyzerState.READY
        return result.index

    async def wait_until_ready(self) -> None:
        """Wait for a build scheduled at construction, if any."""
        if self._index_task is not None:
            await self._index_task

    async def close(self) -> None:
        """Cancel a pending index build."""
        task = self._index_task
        if task is not None and not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
        self._index_task = None

    # -------------------------------------------------------------------------
    # Analysis
    # -------------------------------------------------------------------------

    async def analyze_object_safety(
        self,
        schema_name: str,
        object_name: str,
        *,
        fuzzy_usage: bool = False,
    ) -> AnalysisResult:
        """Resolve an object and assess delete, move and change-owner risks.

        Args:
            schema_name: Schema holding the object.
            object_name: Object name. Empty or equal to ``schema_name`` targets
                the schema itself.
            fuzzy_usage: Scan declared identifiers with the pattern matcher
                instead of the index.
        """
        with request_scope():
            try:
                return await self._analyze(schema_name, object_name, fuzzy_usage=fuzzy_usage)
            except Exception as e:
                error = InternalError.unexpected(str(e), exception=type(e).__name__)
                logger.error(
                    "analysis_failed",
                    code=error.code.value,
                    error_name=error.error_name,
                    error=str(e),
                    schema=schema_name,
                    object=object_name,
                    exc_info=True,
                )
                return AnalysisResult.not_found(str(e))

    async def find_usage(self, object_name: str, schema_name: str) -> list[UsageReference]:
        """Usage of an object according to the current index."""
        database = connected_database(coerce_snapshot(await self._provider.get_metadata()))
        if database is None:
            return []
        return find_usage(self._index, database, object_name, schema_name)

    async def _analyze(self, schema_name: str, object_name: str, *, fuzzy_usage: bool) -> AnalysisResult:
        try:
            snapshot = coerce_snapshot(await self._provider.get_metadata())
        except Exception as e:
            return self._not_found(AnalysisError.metadata_unavailable(str(e)))
        if not snapshot:
            return self._not_found(AnalysisError.metadata_unavailable("empty snapshot"))

        database = connected_database(snapshot)
        if database is None:
            return self._not_found(AnalysisError.database_not_found())

        schema = database.schemas.get(schema_name)
        if schema is None:
            return self._not_found(AnalysisError.schema_not_found(schema_name))

        resolved = resolve_object(schema, schema_name, object_name)
        if resolved is None:
            return self._not_found(AnalysisError.object_not_found(schema_name, object_name))

        return self._assess(database, resolved, fuzzy_usage=fuzzy_usage)

    def _assess(
        self,
        database: DatabaseMetadata,
        resolved: ResolvedObject,
        *,
        fuzzy_usage: bool,
    ) -> AnalysisResult:
        if fuzzy_usage:
            usage = find_usage_fuzzy(database, resolved.name, resolved.schema_name)
        else:
            usage = find_usage(self._index, database, resolved.name, resolved.schema_name)

        analysis = self._config.analysis
        assessment = assess_object(
            resolved,
            usage,
            usage_preview_limit=analysis.usage_preview_limit,
            large_table_rows=analysis.large_table_rows,
        )

        incoming = []
        foreign_key_risk = None
        if isinstance(resolved, ResolvedRelation):
            incoming = find_incoming_foreign_keys(database, resolved.schema_name, resolved.name)
            foreign_key_risk = assess_incoming_foreign_keys(incoming)

        logger.debug(
            "object_assessed",
            kind=resolved.kind.value,
            schema=resolved.schema_name,
            object=resolved.name,
            usage=len(usage),
            overall=assessment.overall_level.label,
        )
        return AnalysisResult(
            found=True,
            object_type=resolved.kind,
            object_name=resolved.name,
            schema_name=resolved.schema_name,
            assessment=assessment,
            used_in_identifiers=usage,
            referenced_by_foreign_keys=incoming,
            foreign_key_risk=foreign_key_risk,
        )

    def _not_found(self, error: AnalysisError) -> AnalysisResult:
        logger.info("object_not_resolved", error=error.error_name, **error.details)
        return AnalysisResult.not_found(error.message)
