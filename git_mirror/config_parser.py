from collections.abc import Callable, Collection, Sequence
from dataclasses import dataclass, field
import difflib
import functools
import inspect
from typing import Any, NoReturn, cast

import yaml
from yaml import MappingNode, Node, ScalarNode, SequenceNode, YAMLError

from .config import MirrorConfig, MirrorRepoConfig, RemotesConfig
from .logger import describe
from .typed_path import AbsDir, AbsFile, RelFile
from .types import BranchMapping, RemoteSource

type ConfigFile = AbsFile | RelFile

NULL_TAG = "tag:yaml.org,2002:null"
REMOTE_SOURCES: tuple[RemoteSource, ...] = ("upstream", "downstream")


@dataclass(frozen=True, slots=True)
class Context:
    filename: ConfigFile
    node: Node


@dataclass
class ParserError(YAMLError):
    msg: str
    context: Context

    @property
    def position(self) -> str:
        position = str(self.context.filename.path)
        if self.context.node.start_mark is not None:
            position = f"{position}:{self.context.node.start_mark.line + 1}:{self.context.node.start_mark.column + 1}"
        return position

    def __str__(self) -> str:
        return f"An unexpected error occurred during parsing @ {self.position}: {self.msg}"


@dataclass
class Parser:
    filepaths: Sequence[ConfigFile]
    _node: Node = field(
        init=False, repr=False, hash=False, compare=False, default=Node("", None, None, None)
    )
    _visited_nodes: set[int] = field(
        init=False, repr=False, hash=False, compare=False, default_factory=set
    )
    _origins: dict[int, ConfigFile] = field(
        init=False, repr=False, hash=False, compare=False, default_factory=dict
    )

    def __post_init__(self) -> None:
        self._wrap_methods()

    def _wrap_methods(self) -> None:
        for attr in dir(self):
            method = getattr(self, attr)
            if not attr.startswith("__") and inspect.ismethod(method):
                setattr(self, attr, self._context_wrap(method))

    def _context_wrap[**P, R](self, method: Callable[P, R]) -> Callable[P, R]:
        signature = inspect.signature(method, eval_str=False)

        @functools.wraps(method)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            binding = signature.bind(*args, **kwargs)
            node = binding.arguments.get("node")
            if node is None or node is self._node:
                return method(*args, **kwargs)
            # Set nodes before to stop RecursionError during fail.
            previous_node = self._node
            self._node = node
            if id(node) in self._visited_nodes:
                self.fail("recursive reference detected.", node=node)
            self._visited_nodes.add(id(node))
            try:
                return method(*args, **kwargs)
            finally:
                self._node = previous_node
                self._visited_nodes.remove(id(node))

        return wrapper

    @property
    def context(self) -> Context:
        # Nodes from a merged file remember which file they came from.
        return Context(self._origins.get(id(self._node), self.filepaths[0]), self._node)

    def fail(self, message: str, *, node: Node | None = None) -> NoReturn:
        raise ParserError(message, self.context)

    def type_of(self, node: Node) -> str:
        match node:
            case ScalarNode():
                match node.tag:
                    case "tag:yaml.org,2002:null":
                        return "null"
                    case "tag:yaml.org,2002:str":
                        return "empty string" if node.value == "" else "string"
                    case "tag:yaml.org,2002:int":
                        return "integer"
                    case "tag:yaml.org,2002:float":
                        return "float"
                    case "tag:yaml.org,2002:bool":
                        return "boolean"
                    case _:
                        return "scalar"
            case SequenceNode():
                return "sequence"
            case MappingNode():
                return "mapping"
            case _:
                return "unknown"

    def is_null(self, node: Node) -> bool:
        return isinstance(node, ScalarNode) and node.tag == NULL_TAG

    def parse_mapping[T](
        self,
        node: Node,
        subparsers: dict[str, Callable[[Node], Any]],
        combine: Callable[..., T],
        *,
        name: str,
        optional: Collection[str] = (),
    ) -> T:
        results = {}
        match node:
            case MappingNode():
                key_node: Node
                value_node: Node
                for key_node, value_node in node.value:
                    key = self.parse_string_key(key_node, options=subparsers.keys())
                    sub_parser = subparsers[key]
                    if key in results:
                        self.fail(f"duplicate key {key!r} in mapping.", node=key_node)
                    results[key] = sub_parser(value_node)
            case _:
                self.fail(f"expected {name} mapping, got {self.type_of(node)}.")
        for key in subparsers.keys():
            if key not in results.keys() and key not in optional:
                self.fail(f"{name} mapping is missing the key {key!r}.")
        return combine(**results)

    def parse_named_mapping[T](
        self, node: Node, subparser: Callable[[Node], T], *, name: str
    ) -> dict[str, T]:
        if self.is_null(node):
            return {}
        match node:
            case MappingNode():
                results: dict[str, T] = {}
                key_node: Node
                value_node: Node
                for key_node, value_node in node.value:
                    key = self.parse_name(key_node)
                    if key in results:
                        self.fail(f"duplicate {name} {key!r}.", node=key_node)
                    results[key] = subparser(value_node)
                return results
        return self.fail(f"expected {name} mapping, got {self.type_of(node)}.")

    def parse_choice[T: str](self, node: Node, options: Collection[T], *, name: str) -> T:
        match node:
            case ScalarNode() if not self.is_null(node):
                value = node.value
                if value in options:
                    return cast(T, value)
                suggestions = difflib.get_close_matches(value, possibilities=options, n=1)
                if suggestions:
                    [suggestion] = suggestions
                    message = f"invalid {name} {value!r}, did you mean {suggestion!r}?"
                else:
                    message = f"{name} should be one of {list(options)!r}, got {value!r}."
                self.fail(message)
        return self.fail(f"expected a string as the {name}, got {self.type_of(node)}.")

    def parse_string_key[T: str](self, node: Node, options: Collection[T]) -> T:
        return self.parse_choice(node, options, name="key")

    def parse_name(self, node: Node) -> str:
        match node:
            case ScalarNode() if not self.is_null(node) and node.value != "":
                return node.value
        return self.fail(f"expected a name, got {self.type_of(node)}.")

    def parse_optional_name(self, node: Node) -> str | None:
        if self.is_null(node):
            return None
        return self.parse_name(node)

    def parse_remote_source(self, node: Node) -> RemoteSource:
        return self.parse_choice(node, REMOTE_SOURCES, name="remote source")

    def parse_directory(self, node: Node) -> AbsDir:
        return AbsDir.expand(self.parse_name(node))

    def parse_remotes_config(self, node: Node) -> RemotesConfig:
        return self.parse_mapping(
            node,
            subparsers=dict(
                upstream=self.parse_optional_name,
                downstream=self.parse_optional_name,
                backup=self.parse_optional_name,
            ),
            combine=RemotesConfig,
            name="remotes",
            optional=("upstream", "downstream", "backup"),
        )

    def parse_mirror_repo_config(self, node: Node) -> MirrorRepoConfig:
        if self.is_null(node):
            return MirrorRepoConfig()
        return self.parse_mapping(
            node,
            subparsers=dict(
                remote_source=self.parse_remote_source,
                downstream_repo_name=self.parse_optional_name,
            ),
            combine=MirrorRepoConfig,
            name="repo",
            optional=("remote_source", "downstream_repo_name"),
        )

    def parse_repo_configs(self, node: Node) -> dict[str, MirrorRepoConfig]:
        return self.parse_named_mapping(node, self.parse_mirror_repo_config, name="repo")

    def parse_branch_mapping(self, node: Node) -> BranchMapping:
        return self.parse_named_mapping(node, self.parse_optional_name, name="branch")

    def parse_branch_overrides(self, node: Node) -> dict[str, BranchMapping]:
        return self.parse_named_mapping(node, self.parse_branch_mapping, name="repo")

    def parse_mirror_config(self, node: Node) -> MirrorConfig:
        return self.parse_mapping(
            node,
            subparsers=dict(
                working_directory=self.parse_directory,
                productization_name=self.parse_name,
                product_prefix=self.parse_name,
                remotes=self.parse_remotes_config,
                branch_mirror_defaults=self.parse_branch_mapping,
                branch_mirror_overrides=self.parse_branch_overrides,
                repos_to_mirror=self.parse_repo_configs,
            ),
            combine=MirrorConfig,
            name="git_mirror",
            optional=(
                "working_directory",
                "productization_name",
                "product_prefix",
                "branch_mirror_defaults",
                "branch_mirror_overrides",
            ),
        )

    def parse_settings(self, node: Node) -> MirrorConfig:
        # Other top-level sections belong to other tools sharing the settings file.
        match node:
            case MappingNode():
                key_node: Node
                value_node: Node
                for key_node, value_node in node.value:
                    if isinstance(key_node, ScalarNode) and key_node.value == "git_mirror":
                        return self.parse_mirror_config(value_node)
                self.fail("settings mapping is missing the key 'git_mirror'.")
        return self.fail(f"expected settings mapping, got {self.type_of(node)}.")

    def _record_origin(self, tree: Node, filepath: ConfigFile) -> None:
        if id(tree) in self._origins:
            return
        self._origins[id(tree)] = filepath
        match tree:
            case MappingNode():
                for key, value in tree.value:
                    self._record_origin(key, filepath)
                    self._record_origin(value, filepath)
            case SequenceNode():
                for item in tree.value:
                    self._record_origin(item, filepath)

    def _merge(self, base: Node, override: Node) -> Node:
        match base, override:
            case MappingNode(), MappingNode():
                overrides = {
                    key.value: (key, value)
                    for key, value in override.value
                    if isinstance(key, ScalarNode)
                }
                merged = []
                for key, value in base.value:
                    if isinstance(key, ScalarNode) and key.value in overrides:
                        override_key, override_value = overrides.pop(key.value)
                        merged.append((override_key, self._merge(value, override_value)))
                    else:
                        merged.append((key, value))
                merged.extend(
                    (key, value)
                    for key, value in override.value
                    if not isinstance(key, ScalarNode) or key.value in overrides
                )
                tree = MappingNode(
                    override.tag,
                    merged,
                    override.start_mark,
                    override.end_mark,
                    flow_style=override.flow_style,
                )
                self._origins[id(tree)] = self._origins[id(override)]
                return tree
        return override

    def compose(self) -> Node:
        tree: Node | None = None
        for filepath in self.filepaths:
            with open(filepath) as f:
                layer = yaml.compose(f, Loader=yaml.SafeLoader)
            if layer is None:
                continue
            self._record_origin(layer, filepath)
            tree = layer if tree is None else self._merge(tree, layer)
        if tree is None:
            return ScalarNode(NULL_TAG, "")
        return tree

    @describe("Parsing config", level="DEBUG")
    def parse(self) -> MirrorConfig:
        return self.parse_settings(self.compose())

    @classmethod
    def parse_file(cls, filepath: ConfigFile, *overrides: ConfigFile) -> MirrorConfig:
        parser = cls([filepath, *(override for override in overrides if override.exists())])
        return parser.parse()
