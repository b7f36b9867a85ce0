"""
Grove Command-Line Interface.

Provides the ``grove`` entry point with two commands:

- ``grove init``: generate a starter recipe YAML with all defaults
- ``grove run``: train from a recipe and/or command-line flags

Usage:
    grove init
    grove run --epochs 10 --batch 64 --data ./data --out ./outputs
    grove run recipe.yaml --resume outputs/checkpoint_epoch_3.pt
    grove run recipe.yaml --set training.learning_rate=5e-4
"""

from __future__ import annotations

from pathlib import Path
from typing import Annotated, Any

import typer

app = typer.Typer(
    name="grove",
    add_completion=True,
    rich_markup_mode="rich",
    no_args_is_help=True,
)

CONFIG_SNAPSHOT = "config.yaml"


# ── App callback ────────────────────────────────────────────────────────────


def _version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        from importlib.metadata import version as pkg_version

        typer.echo(f"grove {pkg_version('grove')}")
        raise typer.Exit()


@app.callback()
def main(
    _: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            callback=_version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = None,
) -> None:
    """Grove: resumable image-classifier training on binary record datasets."""
    ...  # pragma: no cover


# ── Commands ────────────────────────────────────────────────────────────────


@app.command()
def init(
    output: Annotated[
        Path,
        typer.Argument(help="Output YAML file path."),
    ] = Path("recipe.yaml"),
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Overwrite existing file."),
    ] = False,
) -> None:
    """Generate a starter recipe with all config fields and defaults."""
    import yaml

    if output.exists() and not force:
        typer.echo(f"Error: '{output}' already exists. Use --force to overwrite.", err=True)
        raise typer.Exit(code=1)

    data = _build_init_dict()
    yaml_body = yaml.dump(
        data, default_flow_style=False, sort_keys=False, indent=4, allow_unicode=True
    )
    content = _INIT_HEADER.format(filename=output.name) + yaml_body

    output.write_text(content, encoding="utf-8")
    typer.echo(f"Recipe created: {output}")
    typer.echo(f"Run it with:   grove run {output}")


@app.command()
def run(
    recipe: Annotated[
        Path | None,
        typer.Argument(help="Optional YAML recipe; flags below override it."),
    ] = None,
    epochs: Annotated[int | None, typer.Option("--epochs", help="Target epochs.")] = None,
    batch: Annotated[int | None, typer.Option("--batch", help="Batch size.")] = None,
    lr: Annotated[float | None, typer.Option("--lr", help="Learning rate.")] = None,
    device: Annotated[
        str | None, typer.Option("--device", help="auto, cpu, cuda or mps.")
    ] = None,
    cuda: Annotated[bool, typer.Option("--cuda", help="Shorthand for --device cuda.")] = False,
    data: Annotated[Path | None, typer.Option("--data", help="Dataset root.")] = None,
    out: Annotated[Path | None, typer.Option("--out", help="Output directory.")] = None,
    resume: Annotated[
        Path | None, typer.Option("--resume", help="Checkpoint to resume from.")
    ] = None,
    resume_latest: Annotated[
        bool,
        typer.Option("--resume-latest", help="Resume from the newest checkpoint in --out."),
    ] = False,
    log_every: Annotated[
        int | None, typer.Option("--log-every", help="Progress interval in batches (0 = off).")
    ] = None,
    seed: Annotated[int | None, typer.Option("--seed", help="Random seed.")] = None,
    set_: Annotated[
        list[str] | None,
        typer.Option(
            "--set",
            help="Override config value (repeatable): key.path=value",
        ),
    ] = None,
) -> None:
    """Train the classifier, resuming from a checkpoint when requested."""
    from grove import LOGGER_NAME, Config, Logger, LogStyle, run_training_phase
    from grove.core import latest_checkpoint, save_config_as_yaml
    from grove.exceptions import GroveConfigError, GroveError

    if recipe is not None and not recipe.exists():
        typer.echo(f"Error: recipe not found: {recipe}", err=True)
        raise typer.Exit(code=1)

    overrides = _parse_overrides(set_ or [])
    overrides.update(
        _flag_overrides(
            epochs=epochs,
            batch=batch,
            lr=lr,
            device="cuda" if cuda else device,
            data=data,
            out=out,
            resume=resume,
            log_every=log_every,
            seed=seed,
        )
    )

    try:
        if recipe is not None:
            cfg = Config.from_recipe(recipe, overrides=overrides or None)
        else:
            cfg = Config.from_dict({}, overrides=overrides or None)
    except GroveConfigError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1)

    if resume_latest:
        if resume is not None:
            raise typer.BadParameter("Use either --resume or --resume-latest, not both")
        latest = latest_checkpoint(cfg.telemetry.output_dir)
        cfg = cfg.model_copy(
            update={"telemetry": cfg.telemetry.model_copy(update={"resume_from": latest})}
        )

    run_logger = Logger.setup(
        name=LOGGER_NAME,
        log_dir=cfg.telemetry.log_dir,
        level=cfg.telemetry.log_level,
    )

    try:
        cfg.telemetry.output_dir.mkdir(parents=True, exist_ok=True)
        save_config_as_yaml(cfg, cfg.telemetry.output_dir / CONFIG_SNAPSHOT)
        run_training_phase(cfg)

    except KeyboardInterrupt:
        run_logger.warning(f"{LogStyle.WARNING} Interrupted by user.")
        raise typer.Exit(code=1)

    except (GroveError, OSError) as e:
        run_logger.error(f"{LogStyle.WARNING} Run failed: {e}", exc_info=True)
        raise typer.Exit(code=1)


# ── Private helpers ─────────────────────────────────────────────────────────

_INIT_HEADER = """\
# ==============================================================================
# Grove Starter Recipe (generated by `grove init`)
# ==============================================================================
# Usage:   grove run {filename}
#
# Edit the values you need. Any value can also be overridden with
# --set section.key=value on the command line.
# ==============================================================================

"""

# Flag name -> dotted config key
_FLAG_KEYS: dict[str, str] = {
    "epochs": "training.epochs",
    "batch": "training.batch_size",
    "lr": "training.learning_rate",
    "log_every": "training.log_every",
    "seed": "training.seed",
    "device": "hardware.device",
    "data": "dataset.data_dir",
    "out": "telemetry.output_dir",
    "resume": "telemetry.resume_from",
}


def _flag_overrides(**flags: Any) -> dict[str, Any]:
    """
    Map explicitly passed CLI flags onto dotted config keys.

    Flags left at ``None`` are skipped so the recipe (or default) wins.
    """
    return {_FLAG_KEYS[name]: value for name, value in flags.items() if value is not None}


def _auto_cast(value: str) -> Any:
    """
    Cast a CLI string to the appropriate Python scalar type.

    Args:
        value: Raw string from the command line.

    Returns:
        Converted bool, None, int, float, or the original string.
    """
    low = value.lower()
    if low in ("true", "false"):
        return low == "true"
    if low in ("null", "none"):
        return None
    try:
        return int(value)
    except ValueError:
        pass
    try:
        return float(value)
    except ValueError:
        pass
    return value


def _parse_overrides(raw: list[str]) -> dict[str, Any]:
    """
    Parse ``key.path=value`` strings into a flat override dict.

    Args:
        raw: list of "dotted.key=value" strings from ``--set`` flags.

    Returns:
        dict mapping dotted keys to auto-casted values.

    Raises:
        typer.BadParameter: If an item has no ``=`` or an empty key.
    """
    overrides: dict[str, Any] = {}
    for item in raw:
        if "=" not in item:
            raise typer.BadParameter(f"Override must use key=value format, got: '{item}'")
        key, _, val = item.partition("=")
        key = key.strip()
        if not key:
            raise typer.BadParameter(f"Empty key in override: '{item}'")
        overrides[key] = _auto_cast(val.strip())
    return overrides


def _build_init_dict() -> dict[str, Any]:
    """
    Build a complete config dict with all defaults for recipe generation.

    Returns:
        Ordered dict with every config section dumped via ``model_dump(mode="json")``,
        paths reset to portable relative strings and device reset to ``"auto"``.
    """
    from grove.core.config import DatasetConfig, HardwareConfig, TelemetryConfig, TrainingConfig

    dump = lambda m: m.model_dump(mode="json")  # noqa: E731

    ds = dump(DatasetConfig())
    ds["data_dir"] = "./data"

    hw = dump(HardwareConfig())
    hw["device"] = "auto"

    tel = dump(TelemetryConfig())
    tel["output_dir"] = "./outputs"

    return {
        "training": dump(TrainingConfig()),
        "dataset": ds,
        "hardware": hw,
        "telemetry": tel,
    }


if __name__ == "__main__":  # pragma: no cover
    app()
