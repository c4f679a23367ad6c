"""Configuration loader.

Reads processing settings from YAML files.  A configuration may hold
the options at the top level or under a ``processing:`` section::

    processing:
      voxel_size: 0.05
      remove_outliers: true
      outlier_k: 20
      outlier_std: 2.0
"""

from pathlib import Path
from typing import Any, Dict, Union

import yaml


def load_config(path: Union[str, Path]) -> Dict[str, Any]:
    """Load a YAML configuration file into a dictionary.

    Parameters
    ----------
    path : str or Path
        Path to the YAML configuration file.

    Returns
    -------
    dict
        Parsed configuration dictionary.  Returns an empty dict if the
        file does not exist or is empty.

    Raises
    ------
    ValueError
        If the file is not valid YAML or its top level is not a mapping.
    """
    cfg_path = Path(path)
    if not cfg_path.is_file():
        return {}
    with open(cfg_path, 'r', encoding='utf-8') as f:
        try:
            data = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ValueError(f"invalid YAML in {cfg_path}: {e}") from e
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ValueError(f"{cfg_path}: top level must be a mapping")
    return data
