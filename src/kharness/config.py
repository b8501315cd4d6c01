from __future__ import annotations

from pathlib import Path
from typing import Dict, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .classify import DEFAULT_INTERACTIVE_MARKER, DEFAULT_PROOF_MARKER

KLIST_UNIT = "(.KList)"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="KHARNESS_")

    build_dir: Path = Path(".build")
    backend: str = "ocaml"
    logs_dir: Path = Path(".build/logs")
    tmp_dir: Optional[Path] = None

    converter: str = "kast-json"
    interpreter: Optional[str] = None
    definition: Optional[Path] = None
    prover: str = "kprove"
    runner: str = "krun"

    verification_module: str = "VERIFICATION"
    debug_flag: str = "--debug"
    schedule: str = "BYZANTIUM"
    mode: str = "NORMAL"

    proof_marker: str = DEFAULT_PROOF_MARKER
    interactive_marker: str = DEFAULT_INTERACTIVE_MARKER
    vmtests_marker: str = "VMTests"

    extra_env: Dict[str, str] = Field(default_factory=dict)

    @property
    def backend_dir(self) -> Path:
        return self.build_dir / self.backend

    @property
    def kompiled_dir(self) -> Path:
        return self.backend_dir / "driver-kompiled"

    def interpreter_path(self) -> str:
        if self.interpreter:
            return self.interpreter
        return str(self.kompiled_dir / "interpreter")

    def definition_path(self) -> Path:
        if self.definition is not None:
            return self.definition
        return self.kompiled_dir / "definition.kore"

    def mode_for(self, test_id: str) -> str:
        if self.vmtests_marker and self.vmtests_marker in test_id:
            return "VMTESTS"
        return self.mode

    def schedule_token(self) -> str:
        return f"`{self.schedule}_EVM`{KLIST_UNIT}"

    def mode_token(self, mode: str) -> str:
        return f"`{mode}`{KLIST_UNIT}"
