import logging
from collections.abc import Iterable, Iterator
from pathlib import Path

from typeorm_to_prisma.config import CodemodSettings
from typeorm_to_prisma.core.languages import detect_language_from_path, is_supported_file
from typeorm_to_prisma.core.ports.sink import SchemaSink
from typeorm_to_prisma.core.transform import transform_source
from typeorm_to_prisma.errors import CodemodError
from typeorm_to_prisma.models import MigrationReport
from typeorm_to_prisma.sinks import SchemaFileWriter

logger = logging.getLogger(__name__)

_SKIPPED_DIRS = frozenset({"node_modules", "dist", "build", ".git"})


def iter_source_files(paths: Iterable[Path]) -> Iterator[Path]:
    for path in paths:
        if path.is_dir():
            for candidate in sorted(path.rglob("*")):
                if any(part in _SKIPPED_DIRS for part in candidate.relative_to(path).parts):
                    continue
                if candidate.is_file() and is_supported_file(candidate):
                    yield candidate
        elif path.is_file() and is_supported_file(path):
            yield path


def run_migration(
    paths: Iterable[Path],
    settings: CodemodSettings,
    dry_run: bool = False,
    schema_out: Path | None = None,
    sink: SchemaSink | None = None,
) -> MigrationReport:
    """Transform every supported file under ``paths``; each file is handled independently."""
    report = MigrationReport()
    writer = SchemaFileWriter(provider=settings.datasource_provider)

    for file_path in iter_source_files(paths):
        report.files_scanned += 1
        try:
            source = file_path.read_text(encoding="utf-8")
            result = transform_source(
                source,
                language=detect_language_from_path(file_path),
                settings=settings,
                sink=sink,
                path=str(file_path),
            )
        except (OSError, UnicodeDecodeError, CodemodError) as exc:
            logger.error("Failed to transform %s: %s", file_path, exc)
            report.failures[str(file_path)] = str(exc)
            continue

        writer.add(result, str(file_path))
        if result.changed:
            report.files_changed.append(str(file_path))
            if not dry_run:
                file_path.write_text(result.output, encoding="utf-8")
            logger.info("%s %s", "Would rewrite" if dry_run else "Rewrote", file_path)

    report.models = writer.model_names
    if schema_out is not None and writer.write(schema_out):
        report.schema_path = str(schema_out)
    return report
