"""
ormgen entrypoint.
Reads a JSON generation request, runs the pipeline and prints a JSON summary
of every generated storage model.

Usage:
    python -m ormgen.main request.json

Exits 1 on a schema configuration error and 2 on a usage error or an
invalid request.
"""
from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ormgen.core.exceptions import ConfigurationError
from ormgen.schemas.descriptor import GenerationRequest
from ormgen.services.generator_service import GeneratedFile, Generator

logger = logging.getLogger(__name__)


def summarize(files: list[GeneratedFile]) -> list[dict[str, Any]]:
    return [
        {
            "file": generated.name,
            "package": generated.package,
            "models": [
                {
                    "name": model.name,
                    "table": model.table_name,
                    "fields": [
                        {
                            "name": field.name,
                            "kind": field.kind.value,
                            "base_type": field.base_type,
                            "nullable": field.nullable,
                            "column_type": field.column_type,
                        }
                        for field in model.fields
                    ],
                    "conversion": model.converter.describe(),
                }
                for model in generated.models
            ],
        }
        for generated in files
    ]
def main(argv: list[str] | None = None) -> int:
    args = sys.argv[1:] if argv is None else argv
    if len(args) != 1:
        print(__doc__, file=sys.stderr)
        return 2

    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(name)s: %(message)s")
    try:
        request = GenerationRequest.model_validate_json(Path(args[0]).read_text(encoding="utf-8"))
        files = Generator().run(request)
    except ValidationError as exc:
        logger.error("Invalid generation request: %s", exc)
        return 2
    except ConfigurationError as exc:
        logger.error("Generation failed [%s]: %s", exc.error_code, exc.detail)
        return 1
    print(json.dumps(summarize(files), indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
