import os
from typing import Any, List, Mapping, Optional, Union

from omegaconf import DictConfig, OmegaConf
from pydantic import BaseModel, Field, model_validator

from attkinpy.errors import MalformedInputError
from attkinpy.interpolation import InterpolationConfig
from attkinpy.logging_utils import LoggingConfig


class KinematicsConfig(BaseModel):
    interpolation: InterpolationConfig = Field(default_factory=InterpolationConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @model_validator(mode="before")
    @classmethod
    def from_omegaconf(cls, data: Any) -> Any:
        if isinstance(data, DictConfig):
            data = OmegaConf.to_container(data, resolve=True)
        return data


def load_config(
    source: Union[str, os.PathLike, Mapping, DictConfig, None] = None,
    overrides: Optional[List[str]] = None
) -> KinematicsConfig:
    """Load a `KinematicsConfig` from YAML, a mapping or a DictConfig.

    Args:
        source: path to a YAML file, a plain mapping, a DictConfig, or None for defaults
        overrides: OmegaConf dot-list applied on top, e.g. ["interpolation.filter=use_rra"]
    """
    if source is None:
        cfg = OmegaConf.create({})
    elif isinstance(source, DictConfig):
        cfg = source
    elif isinstance(source, Mapping):
        cfg = OmegaConf.create(dict(source))
    elif isinstance(source, (str, os.PathLike)):
        if not os.path.isfile(source):
            raise MalformedInputError(f"configuration file {source} does not exist")
        cfg = OmegaConf.load(source)
    else:
        raise MalformedInputError(f"unsupported configuration source {type(source).__name__}")

    if overrides:
        cfg = OmegaConf.merge(cfg, OmegaConf.from_dotlist(list(overrides)))
    return KinematicsConfig.model_validate(cfg)
