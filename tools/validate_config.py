# tools/validate_config.py
import json
import sys
from pathlib import Path

from pydantic import ValidationError

ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(ROOT))

from src.installation.spec.resolve import resolve  # noqa: E402
from src.installation.spec.types import footprint_params  # noqa: E402
from src.schema import InstallationRequest  # noqa: E402
from tools.debug.io import load_json  # noqa: E402

DEFAULT_EXAMPLE = ROOT / "data" / "examples" / "rectangle_flat.json"


def main() -> int:
    path = Path(sys.argv[1]) if len(sys.argv) > 1 else DEFAULT_EXAMPLE
    raw = load_json(path)

    print("INPUT JSON:")
    print(json.dumps(raw, ensure_ascii=False, indent=2))

    try:
        req = InstallationRequest.model_validate(raw)
    except ValidationError as e:
        print("\nVALIDATION ERROR")
        print(e)
        return 1

    print("\nInstallationRequest OK")
    resolved, diagnostics = resolve(req.to_config())
    summary = {
        "style": resolved.style,
        "preset_id": resolved.preset_id,
        "shape": resolved.shape.value,
        "footprint": footprint_params(resolved.footprint),
        "surface": resolved.surface.kind,
        "density_level": resolved.density_level.value,
        "warnings": [event.to_dict() for event in diagnostics.warnings],
    }
    print("\nResolved config:")
    print(json.dumps(summary, ensure_ascii=False, indent=2, default=str))
    return 0


if __name__ == "__main__":
    sys.exit(main())
