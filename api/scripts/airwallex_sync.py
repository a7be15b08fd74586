"""
CLI: Airwallex -> Postgres (reconciliacion one-way).

Uso recomendado:
  - Ejecutar como job (cron/systemd timer), una categoria por invocacion.
  - El API expone el mismo motor en POST /api/v1/sync/airwallex/{category}.

Variables de entorno requeridas:
  - AIRWALLEX_CLIENT_ID
  - AIRWALLEX_API_KEY
  - DATABASE_URL (postgresql://..., postgresql+asyncpg://... tambien se acepta)

Ejecución:
  python scripts/airwallex_sync.py --category contractors
  python scripts/airwallex_sync.py --category clients --json
  python scripts/airwallex_sync.py --category suppliers --entity-id <uuid>
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from loguru import logger
from dotenv import load_dotenv

# Permite ejecutar este script desde cualquier cwd sin configurar PYTHONPATH.
# La carpeta "api" contiene el paquete raíz `akemisflow/`.
_API_ROOT = Path(__file__).resolve().parents[1]
if str(_API_ROOT) not in sys.path:
    sys.path.insert(0, str(_API_ROOT))

# Cargar variables desde .env si existe (api/.env o raiz del repo).
# Debe ocurrir antes de importar settings.
_REPO_ROOT = _API_ROOT.parent
load_dotenv(_API_ROOT / ".env", override=False)
load_dotenv(_REPO_ROOT / ".env", override=False)

from akemisflow.core.config import settings
from akemisflow.infrastructure.external.airwallex_sync.entity_mappings import get_entity_sync_config
from akemisflow.infrastructure.external.airwallex_sync.sync_service import build_from_settings
from akemisflow.shared.constants.sync_constants import EntityCategory
from akemisflow.shared.exceptions.base import AppException


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Sincroniza entidades desde Airwallex a Postgres.")
    parser.add_argument(
        "--category",
        required=True,
        choices=[c.value for c in EntityCategory],
        help="Categoria de entidades a sincronizar.",
    )
    parser.add_argument(
        "--entity-id",
        default=None,
        help="Re-sincroniza solo esta entidad (debe estar vinculada a Airwallex).",
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Imprime el resultado completo como JSON.",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    try:
        config = get_entity_sync_config(args.category)
        service, _, _ = build_from_settings(settings)

        if args.entity_id:
            logger.info(f"Resync Airwallex de {config.entity_label} {args.entity_id}...")
            result = service.sync_one(config=config, entity_id=args.entity_id)
        else:
            logger.info(f"Iniciando Airwallex -> Postgres sync de {config.category.value}...")
            result = service.run_once(config=config)
    except AppException as e:
        logger.error(f"Sync abortado: {e.message}")
        return 2

    if args.json:
        print(json.dumps(result.to_dict(), indent=2, ensure_ascii=False))

    for error in result.errors:
        logger.warning(f"  {error.external_id or '<corrida>'}: {error.message}")

    # 0 = todo OK, 1 = corrida con errores (parcial o fatal)
    return 0 if result.success else 1


if __name__ == "__main__":
    raise SystemExit(main())
