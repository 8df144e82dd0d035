"""Utility script to write the environment variables the story service reads from .env."""
from __future__ import annotations

import argparse
import shutil
from pathlib import Path
from typing import Dict, Optional, Sequence

from dotenv import dotenv_values, set_key

REPO_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_ENV_PATH = REPO_ROOT / ".env"
BACKUP_SUFFIX = ".bak"

CREDENTIAL_KEYS = {
    "replicate": "REPLICATE_API_TOKEN",
    "openai": "OPENAI_API_KEY",
}


def parse_args(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Create or update a .env file with the settings required to run the story service locally."
    )
    parser.add_argument(
        "--flask-app",
        default="wsgi.py",
        help="Entry point used by Flask (default: wsgi.py)",
    )
    parser.add_argument(
        "--backend",
        choices=sorted(CREDENTIAL_KEYS),
        default="replicate",
        help="Hosted model provider used for generation (default: replicate)",
    )
    parser.add_argument(
        "--token",
        help="API credential for the selected backend. If omitted, the current value in .env is preserved.",
    )
    parser.add_argument(
        "--model",
        help="Override the model identifier (STORY_MODEL for replicate, OPENAI_MODEL for openai).",
    )
    parser.add_argument(
        "--rate-limit",
        help="Override STORY_RATE_LIMIT, e.g. '6 per 10 seconds'.",
    )
    parser.add_argument(
        "--env-path",
        type=Path,
        default=DEFAULT_ENV_PATH,
        help="Path to the .env file that should be created/updated.",
    )
    return parser.parse_args(argv)


def read_env(path: Path) -> Dict[str, str]:
    if not path.exists():
        return {}
    return {key: value or "" for key, value in dotenv_values(path).items()}


def write_env(path: Path, values: Dict[str, str]) -> None:
    if path.exists():
        backup_path = path.with_suffix(path.suffix + BACKUP_SUFFIX)
        shutil.copy(path, backup_path)
        print(f"Existing {path.name} backed up to {backup_path.name}.")
    else:
        path.touch()
    for key, value in values.items():
        set_key(path, key, value, quote_mode="never")
    print(f"Updated environment variables written to {path}.")


def update_env_file(args: argparse.Namespace) -> Dict[str, str]:
    env_data = read_env(args.env_path)
    env_updates = {
        "FLASK_APP": args.flask_app,
        "GENERATION_BACKEND": args.backend,
    }
    if args.token:
        env_updates[CREDENTIAL_KEYS[args.backend]] = args.token
    if args.model:
        model_key = "OPENAI_MODEL" if args.backend == "openai" else "STORY_MODEL"
        env_updates[model_key] = args.model
    if args.rate_limit:
        env_updates["STORY_RATE_LIMIT"] = args.rate_limit

    env_data.update(env_updates)
    write_env(args.env_path, env_data)
    return env_data


def _redact(key: str, value: str) -> str:
    if key in CREDENTIAL_KEYS.values() and value:
        return value[:4] + "…" + value[-4:]
    return value


def main(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_args(argv)
    env_values = update_env_file(args)

    credential_key = CREDENTIAL_KEYS[args.backend]
    if not env_values.get(credential_key):
        print(f"\nWarning: {credential_key} is not set; story requests will fail with missing_token.")

    print("\nSetup complete! Summary:")
    for key in sorted(env_values):
        print(f"  {key}={_redact(key, env_values[key])}")


if __name__ == "__main__":
    main()
