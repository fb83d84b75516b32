"""Service-independent key/value tag set."""

from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from tfaws.config.models import IgnoreTagsConfig
from tfaws.names import AWS_TAG_PREFIX, system_tag_prefixes


class KeyValueTags:
    """An immutable set of tags, keyed by tag key.

    Values are optional: a key with a None value has no value, and None is
    only equal to None when comparing tag sets. Every operation returns a
    new KeyValueTags.
    """

    __slots__ = ('_tags',)

    def __init__(self, tags: Optional[Dict[str, Optional[str]]] = None):
        self._tags: Dict[str, Optional[str]] = dict(tags or {})

    @classmethod
    def new(cls, value: Any = None) -> 'KeyValueTags':
        """Build tags from any of the shapes handlers deal with.

        Accepts None, another KeyValueTags, a dict of key to value, a list of
        ``{"Key": ..., "Value": ...}`` dicts, or a list of bare keys.
        """
        if value is None:
            return cls()
        if isinstance(value, KeyValueTags):
            return cls(value._tags)
        if isinstance(value, dict):
            return cls({str(k): (None if v is None else str(v)) for k, v in value.items()})
        if isinstance(value, (list, tuple, set, frozenset)):
            tags = {}
            for item in value:
                if isinstance(item, dict):
                    item_value = item.get('Value')
                    tags[str(item['Key'])] = None if item_value is None else str(item_value)
                else:
                    tags[str(item)] = None
            return cls(tags)
        raise TypeError(f"cannot build tags from {type(value).__name__}")

    def __len__(self) -> int:
        return len(self._tags)

    def __contains__(self, key: object) -> bool:
        return key in self._tags

    def __iter__(self) -> Iterator[str]:
        return iter(sorted(self._tags))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, KeyValueTags):
            return NotImplemented
        return self._tags == other._tags

    def __repr__(self) -> str:
        return f"KeyValueTags({self._tags!r})"

    def get(self, key: str) -> Optional[str]:
        return self._tags.get(key)

    def keys(self) -> List[str]:
        """Tag keys in sorted order."""
        return sorted(self._tags)

    def items(self) -> List[Tuple[str, Optional[str]]]:
        return [(k, self._tags[k]) for k in self.keys()]

    def map(self) -> Dict[str, str]:
        """Plain str -> str mapping, missing values rendered as empty strings."""
        return {k: ('' if v is None else v) for k, v in self._tags.items()}

    def to_dict(self) -> Dict[str, str]:
        """Wire shape for services that take a tag map."""
        return self.map()

    def to_list(self) -> List[Dict[str, str]]:
        """Wire shape for services that take a list of Key/Value pairs."""
        return [{'Key': k, 'Value': '' if v is None else v} for k, v in self.items()]

    def _filter(self, predicate) -> 'KeyValueTags':
        return KeyValueTags({k: v for k, v in self._tags.items() if predicate(k)})

    def ignore_prefixes(self, prefixes: Iterable[str]) -> 'KeyValueTags':
        prefixes = tuple(prefixes)
        if not prefixes:
            return KeyValueTags(self._tags)
        return self._filter(lambda k: not k.startswith(prefixes))

    def ignore_aws(self) -> 'KeyValueTags':
        """Drop tags whose keys start with "aws:"."""
        return self.ignore_prefixes((AWS_TAG_PREFIX,))

    def ignore_system(self, service: str) -> 'KeyValueTags':
        """Drop tags reserved by AWS or by the given service."""
        return self.ignore_prefixes(system_tag_prefixes(service))

    def ignore_config(self, config: Optional[IgnoreTagsConfig]) -> 'KeyValueTags':
        """Drop tags named by the provider's ignore_tags settings."""
        if config is None or config.is_empty():
            return KeyValueTags(self._tags)
        keys = set(config.keys)
        return self.ignore_prefixes(config.key_prefixes)._filter(lambda k: k not in keys)

    def ignore(self, other: 'KeyValueTags') -> 'KeyValueTags':
        """Drop tags whose keys appear in other."""
        return self._filter(lambda k: k not in other._tags)

    def only(self, keys: Iterable[str]) -> 'KeyValueTags':
        keys = set(keys)
        return self._filter(lambda k: k in keys)

    def merge(self, other: 'KeyValueTags') -> 'KeyValueTags':
        """Union of both sets; other wins on conflicting keys."""
        merged = dict(self._tags)
        merged.update(other._tags)
        return KeyValueTags(merged)

    def removed(self, new: 'KeyValueTags') -> 'KeyValueTags':
        """Tags present here and absent from new."""
        return self._filter(lambda k: k not in new._tags)

    def updated(self, new: 'KeyValueTags') -> 'KeyValueTags':
        """Tags of new that are absent here or carry a different value."""
        return KeyValueTags({
            k: v for k, v in new._tags.items()
            if k not in self._tags or self._tags[k] != v
        })

    def contains_all(self, other: 'KeyValueTags') -> bool:
        return all(k in self._tags and self._tags[k] == v for k, v in other._tags.items())

    def chunks(self, size: int) -> List['KeyValueTags']:
        """Split into sets of at most size keys, in key order."""
        if size < 1:
            raise ValueError("chunk size must be positive")
        keys = self.keys()
        return [self.only(keys[i:i + size]) for i in range(0, len(keys), size)]
