import sys
from pathlib import Path
from typing import Any

import pytest


def _add_src_to_path() -> None:
    root = Path(__file__).resolve().parents[1]
    src_path = root / "src"
    if str(src_path) not in sys.path:
        sys.path.insert(0, str(src_path))


_add_src_to_path()

from srcloc.artifact import CompiledArtifact  # noqa: E402
from srcloc.context import SourceContext  # noqa: E402

# Line starts: 0, 24, 25, 42, 73, 107, 109.
VAULT_SOURCE = "\n".join(
    [
        "pragma solidity ^0.5.0;",
        "",
        "contract Vault {",
        "    uint256[] public balances;",
        "    uint256[3] public fixedSlots;",
        "}",
        "",
    ]
)
VAULT_PATH = "contracts/Vault.sol"

# Instructions start at 0, 2, 4, 5, 6, 7, 8, 11, 12, 14, 15.
VAULT_BYTECODE = "0x" + "6080604052348015" + "61000f57" + "600080fd"
VAULT_SOURCE_MAP = "0:60:0:-:0;;;25:10;;;40:8;;::-1;;46:25:0"


def _elementary(src: str) -> dict[str, Any]:
    return {"nodeType": "ElementaryTypeName", "src": src, "name": "uint256"}


VAULT_AST: dict[str, Any] = {
    "nodeType": "SourceUnit",
    "src": "0:109:0",
    "absolutePath": VAULT_PATH,
    "nodes": [
        {"nodeType": "PragmaDirective", "src": "0:23:0", "literals": ["solidity"]},
        {
            "nodeType": "ContractDefinition",
            "src": "25:83:0",
            "name": "Vault",
            "nodes": [
                {
                    "nodeType": "VariableDeclaration",
                    "src": "46:25:0",
                    "name": "balances",
                    "stateVariable": True,
                    "visibility": "public",
                    "typeName": {
                        "nodeType": "ArrayTypeName",
                        "src": "46:9:0",
                        "length": None,
                        "baseType": _elementary("46:7:0"),
                    },
                },
                {
                    "nodeType": "VariableDeclaration",
                    "src": "77:28:0",
                    "name": "fixedSlots",
                    "stateVariable": True,
                    "visibility": "public",
                    "typeName": {
                        "nodeType": "ArrayTypeName",
                        "src": "77:10:0",
                        "length": {"nodeType": "Literal", "src": "85:1:0", "value": "3"},
                        "baseType": _elementary("77:7:0"),
                    },
                },
            ],
        },
    ],
}


def vault_build_json(**overrides: Any) -> dict[str, Any]:
    payload: dict[str, Any] = {
        "contractName": "Vault",
        "sourcePath": VAULT_PATH,
        "deployedBytecode": VAULT_BYTECODE,
        "sourceMap": VAULT_SOURCE_MAP,
        "deployedSourceMap": VAULT_SOURCE_MAP,
        "ast": VAULT_AST,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def vault_artifact() -> CompiledArtifact:
    return CompiledArtifact.from_build_json(vault_build_json())


@pytest.fixture
def vault_context(vault_artifact: CompiledArtifact) -> SourceContext:
    return SourceContext.build(vault_artifact, {VAULT_PATH: VAULT_SOURCE})
