"""Rule list loader for create/release pair rules."""

from typing import Any, Dict, List, Optional
from pathlib import Path
import logging

import yaml
from pydantic import ValidationError

from ..config import ConfigError
from ..models.rule import PairRule, RuleSpec

logger = logging.getLogger(__name__)


# Generic rule first, then the encoder override that can rescue
# encoders flagged by the generic one.
DEFAULT_RULES: List[Dict[str, Any]] = [
    {
        "name": "generic",
        "create": r".*_create",
        "release": r".*_(release|destroy)",
    },
    {
        "name": "encoder",
        "create": r"obs_.*_encoder_create",
        "release": r"obs_encoder_release",
        "match_base_name": False,
    },
]


class RulesLoader:
    """Load ordered create/release rules from defaults, dicts or YAML."""

    def load(self, entries: Optional[List[Any]] = None) -> List[PairRule]:
        """Build rules from a list of rule mappings.

        Args:
            entries: Rule mappings with keys ``name``, ``create``,
                ``release`` and optionally ``match_base_name``.
                None or an empty list selects DEFAULT_RULES.

        Returns:
            Compiled rules in the given order

        Raises:
            ConfigError: If an entry is not a valid rule mapping
            PatternError: If a rule pattern is not a valid regex
        """
        if not entries:
            entries = DEFAULT_RULES

        if not isinstance(entries, list):
            raise ConfigError(
                f"Rules must be a list of mappings, got {type(entries).__name__}"
            )

        rules = []
        for index, entry in enumerate(entries):
            try:
                spec = RuleSpec.model_validate(entry)
            except ValidationError as e:
                raise ConfigError(f"Invalid rule #{index + 1}: {e}") from e

            rule = spec.to_rule(index)
            logger.debug(f"Loaded rule {rule}")
            rules.append(rule)

        return rules

    def load_from_yaml(self, path: str) -> List[PairRule]:
        """Load rules from a YAML file.

        Expected YAML format:
        ```yaml
        rules:
          - name: generic
            create: ".*_create"
            release: ".*_(release|destroy)"
          - name: encoder
            create: "obs_.*_encoder_create"
            release: "obs_encoder_release"
            match_base_name: false
        ```

        Args:
            path: Path to the YAML file

        Returns:
            Compiled rules in file order

        Raises:
            ConfigError: If the file cannot be read or has no rules
            PatternError: If a rule pattern is not a valid regex
        """
        rules_path = Path(path)
        try:
            with open(rules_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f)
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Cannot read rules file {path}: {e}") from e

        if not isinstance(data, dict) or not data.get("rules"):
            raise ConfigError(f"No 'rules' key found in YAML: {path}")

        rules = self.load(data["rules"])
        logger.info(f"Loaded {len(rules)} rules from YAML: {path}")
        return rules
