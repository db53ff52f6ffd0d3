# loader.py
from __future__ import annotations

from pathlib import Path
from typing import Any, List, Optional, Union

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from .errors import ConfigError
from .model import Component
from .tee import Tee


# -------------------- Schemas --------------------

class TeeSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    stdout: bool = False
    stderr: bool = False
    combined: bool = False


class ComponentSpec(BaseModel):
    # `cmd: [sleep, 1]` is fine in YAML; keep numbers as argument strings
    model_config = ConfigDict(extra="forbid", coerce_numbers_to_str=True)

    entrypoint: List[str] = Field(default_factory=list)
    cmd: List[str] = Field(default_factory=list)
    depends: str = ""
    workdir: str = ""
    before: List[ComponentSpec] = Field(default_factory=list)
    after: List[ComponentSpec] = Field(default_factory=list)
    tee: TeeSpec = Field(default_factory=TeeSpec)

    @field_validator("entrypoint", "cmd", mode="before")
    @classmethod
    def _single_string(cls, v: Any) -> Any:
        # `cmd: make` is shorthand for `cmd: [make]`
        if v is None:
            return []
        if isinstance(v, str):
            return [v]
        return v

    @field_validator("before", "after", mode="before")
    @classmethod
    def _null_list(cls, v: Any) -> Any:
        return [] if v is None else v

    def to_component(self) -> Component:
        return Component(
            entrypoint=list(self.entrypoint),
            cmd=list(self.cmd),
            depends=self.depends,
            workdir=self.workdir,
            before=[c.to_component() for c in self.before],
            after=[c.to_component() for c in self.after],
            tee=Tee(stdout=self.tee.stdout, stderr=self.tee.stderr, combined=self.tee.combined),
        )


ComponentSpec.model_rebuild()


class ConfigSpec(BaseModel):
    model_config = ConfigDict(extra="forbid")

    components: List[ComponentSpec] = Field(default_factory=list)


# -------------------- Loading --------------------

def parse_config(data: Any, source: str = "<config>") -> List[Component]:
    """
    Turn an already-parsed YAML document into component trees.

    A document is either a single component mapping or a mapping with a
    `components` list. The returned trees are meant to run in order.
    """
    if not isinstance(data, dict):
        raise ConfigError(source, "config must be a mapping", [f"got {type(data).__name__}"])

    try:
        if "components" in data:
            specs = ConfigSpec.model_validate(data).components
        else:
            specs = [ComponentSpec.model_validate(data)]
    except ValidationError as e:
        details = [
            f"{'.'.join(str(p) for p in err['loc']) or '<root>'}: {err['msg']}"
            for err in e.errors()
        ]
        raise ConfigError(source, "invalid component definition", details) from e

    if not specs:
        raise ConfigError(source, "no components defined")

    return [s.to_component() for s in specs]


def load_config(path: Union[str, Path]) -> List[Component]:
    """
    Load component trees from a YAML file.

    Raises:
        ConfigError: the file is missing, is not valid YAML, or does not
            match the component schema
    """
    cfg_path = Path(path).expanduser()
    if not cfg_path.is_file():
        raise ConfigError(str(cfg_path), "config file not found")

    try:
        with cfg_path.open("r", encoding="utf-8") as stream:
            data = yaml.safe_load(stream)
    except yaml.YAMLError as e:
        raise ConfigError(str(cfg_path), "invalid YAML", [str(e)]) from e
    except OSError as e:
        raise ConfigError(str(cfg_path), "unable to read config", [str(e)]) from e

    return parse_config(data, source=str(cfg_path))


def default_prefix(config_path: Union[str, Path], prefix: Optional[str] = None) -> str:
    """Prefix to apply to a loaded tree: explicit value, else the config file's directory."""
    if prefix:
        return prefix
    return str(Path(config_path).expanduser().parent)
