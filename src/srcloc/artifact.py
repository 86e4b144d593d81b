# Copyright 2026 Zsolt Kulcsar and Contributors. Licensed under the EUPL-1.2 or later
"""Compiled contract artifacts."""

import logging
from dataclasses import dataclass, field
from functools import cached_property
from typing import Any, Mapping

from srcloc.bytecode import InstructionTable, build_instruction_table, decode_hex
from srcloc.offsets import OffsetResolver
from srcloc.srcmap import FormatError, SourceMapEntry, decompress_source_map

logger = logging.getLogger(__name__)


class ArtifactError(ValueError):
    """Represent a structurally invalid compiled artifact."""


@dataclass(frozen=True)
class CompiledArtifact:
    """Represent one contract build.

    Attributes:
        contract_name: Contract name.
        source_path: Path of the main source file.
        deployed_bytecode: Runtime bytecode as hex text.
        source_map: Compressed creation source map.
        deployed_source_map: Compressed runtime source map.
        ast: Compact-JSON AST of the main source file.
        source_list: File identifiers referenced by source-map file indexes.
    """

    contract_name: str
    source_path: str
    deployed_bytecode: str = ""
    source_map: str = ""
    deployed_source_map: str = ""
    ast: Mapping[str, Any] | None = field(default=None, compare=False)
    source_list: tuple[str, ...] = ()

    @classmethod
    def from_build_json(cls, payload: Mapping[str, Any]) -> "CompiledArtifact":
        """Build an artifact from a Truffle-style build JSON object.

        Args:
            payload: Parsed build JSON.

        Returns:
            Artifact; ``source_list`` defaults to ``[sourcePath]``.

        Raises:
            ArtifactError: If ``contractName`` or ``sourcePath`` is missing.
        """
        contract_name = payload.get("contractName")
        source_path = payload.get("sourcePath")
        if not contract_name or not source_path:
            raise ArtifactError("Build JSON requires contractName and sourcePath.")
        source_list = payload.get("sourceList") or payload.get("sources") or [source_path]
        return cls(
            contract_name=str(contract_name),
            source_path=str(source_path),
            deployed_bytecode=str(payload.get("deployedBytecode") or ""),
            source_map=str(payload.get("sourceMap") or ""),
            deployed_source_map=str(payload.get("deployedSourceMap") or ""),
            ast=payload.get("ast"),
            source_list=tuple(str(source) for source in source_list),
        )

    @cached_property
    def instruction_table(self) -> InstructionTable:
        if not self.deployed_bytecode:
            raise ArtifactError(
                f"Artifact has no deployed bytecode (contract={self.contract_name})"
            )
        try:
            code = decode_hex(self.deployed_bytecode)
        except ValueError as exc:
            raise ArtifactError(
                f"Deployed bytecode is not valid hex (contract={self.contract_name})"
            ) from exc
        return build_instruction_table(code)

    @cached_property
    def deployed_entries(self) -> tuple[SourceMapEntry, ...]:
        if not self.deployed_source_map:
            raise ArtifactError(
                f"Artifact has no deployed source map (contract={self.contract_name})"
            )
        try:
            return decompress_source_map(self.deployed_source_map)
        except FormatError as exc:
            raise ArtifactError(
                f"Deployed source map is malformed (contract={self.contract_name} error={exc})"
            ) from exc

    @cached_property
    def offset_resolver(self) -> OffsetResolver:
        """Resolver for runtime bytecode offsets.

        Raises:
            ArtifactError: If the bytecode or runtime source map is missing or
                malformed.
        """
        resolver = OffsetResolver(self.instruction_table, self.deployed_entries)
        logger.debug(
            f"Built instruction table (contract={self.contract_name} "
            f"instructions={len(self.instruction_table)} entries={len(self.deployed_entries)})"
        )
        return resolver
