from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, Mapping, Optional, Sequence

DEFAULT_LABEL = "billete"


def load_class_names(metadata_path: str) -> Dict[int, str]:
    """
    Load class names from a lightweight `metadata.yaml` file:

        names:
          0: billete
          1: moneda

    Only the `names:` block is read; everything else is ignored.
    """

    names: Dict[int, str] = {}
    in_names = False

    with open(metadata_path, "r", encoding="utf-8") as f:
        for raw in f:
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            if line == "names:":
                in_names = True
                continue
            if not in_names:
                continue

            if ":" not in line:
                continue
            left, right = line.split(":", 1)
            left = left.strip()
            if not left.isdigit():
                # Next top-level key ends the block.
                if not raw.startswith((" ", "\t")):
                    in_names = False
                continue
            names[int(left)] = right.strip().strip("'").strip('"')

    return names


@dataclass(frozen=True)
class LabelMap:
    """
    Class id -> label string.

    `default` is used for ids missing from `names`; when it is None the id
    itself is rendered as the label.
    """

    names: Mapping[int, str] = field(default_factory=dict)
    default: Optional[str] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "names", MappingProxyType({int(k): str(v) for k, v in self.names.items()}))

    def __hash__(self) -> int:
        return hash((tuple(sorted(self.names.items())), self.default))

    @classmethod
    def single(cls, label: str = DEFAULT_LABEL) -> "LabelMap":
        return cls(names={}, default=label)

    @classmethod
    def from_sequence(cls, labels: Sequence[str], default: Optional[str] = None) -> "LabelMap":
        return cls(names={i: str(name) for i, name in enumerate(labels)}, default=default)

    def label_for(self, class_id: int) -> str:
        name = self.names.get(int(class_id))
        if name is not None:
            return name
        if self.default is not None:
            return self.default
        return str(class_id)

    def __len__(self) -> int:
        return len(self.names)


def load_label_map(metadata_path: str, default: Optional[str] = None) -> LabelMap:
    names = load_class_names(metadata_path)
    if not names:
        raise ValueError(f"No class names found in metadata: {metadata_path}")
    return LabelMap(names=names, default=default)
