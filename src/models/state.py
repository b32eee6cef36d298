"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional build pipeline and
the pipeline() helper for composing transformation stages.
"""

import dataclasses
from pathlib import Path
from argparse import Namespace
from functools import reduce
from typing import Any, Optional, Type, TypeVar, List, Dict, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the site build (state bus pattern).

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, theme, themesDir
        - env_check: themeObj, envOK
        - sources_discover: sourceFiles
        - documents_compile: compiledFiles, failedFiles
        - statics_copy: copiedFiles
        - results_report: (no additions, terminal stage)

    Attributes:
        inputdir: Root of the document tree
        outputdir: Root of the generated site
        verbosity: Logging verbosity level (1-3)
        theme: Theme name
        themesDir: Optional directory holding theme folders
        envOK: Environment validation passed
        themeObj: Loaded Theme
        sourceFiles: Documents to compile, relative to inputdir
        compiledFiles: Written pages, relative to outputdir
        failedFiles: Relative source path -> failure message
        copiedFiles: Number of static files copied
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    theme: str = field(default="default")
    themesDir: Optional[str] = field(default=None)

    # Pipeline state
    envOK: bool = field(default=False)
    themeObj: Optional[Any] = field(default=None)  # Theme at runtime
    sourceFiles: List[Path] = field(default_factory=list)
    compiledFiles: List[Path] = field(default_factory=list)
    failedFiles: Dict[str, str] = field(default_factory=dict)
    copiedFiles: int = field(default=0)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Options that are not ProgramState fields are dropped.
        """
        valid_fields = {f.name for f in dataclasses.fields(cls)}
        filtered_options = {k: v for k, v in vars(options).items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """Shallow copy handed to the next stage (lists and dicts are shared)."""
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Run the build stages in order, feeding each one the state returned by
    the previous one.

    Example:
        pipeline(state, env_check, sources_discover, documents_compile,
                 statics_copy, results_report)
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
