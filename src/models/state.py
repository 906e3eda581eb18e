"""
Program state model and pipeline helper

Defines ProgramState dataclass for the functional pipeline pattern and
the pipeline() helper for composing CLI stages.
"""

import dataclasses
from functools import reduce
from pathlib import Path
from argparse import Namespace
from typing import Any, Optional, Type, TypeVar, Callable
from dataclasses import dataclass, field


PS = TypeVar("PS", bound="ProgramState")


@dataclass
class ProgramState:
    """
    Central state container for the CLI pipeline (state bus pattern).

    Pipeline stages and their state additions:
        - Initial: inputdir, outputdir, verbosity, inputFile, pluginDir,
          styleCatalog, webSvcDir, serve, host, port
        - env_check: inputSourceFile, envOK, context
        - document_convert: convertedHtml
        - styles_resolve: styleResult
        - plugin_extract: pluginExtraction
        - page_write: outputFile
        - results_report: (no additions)
        - server_run: (terminal, blocks until interrupted)

    Attributes:
        inputdir: Directory holding the RodiX document (the htmlStore folder)
        outputdir: Directory the rendered preview page is written to
        verbosity: Logging verbosity level (1-3)
        inputFile: Document file name, relative to inputdir
        pluginDir: Plugin directory holding *Contribution.js (optional)
        styleCatalog: Style catalog YAML file (optional, package default otherwise)
        webSvcDir: Root the style catalog paths are relative to (optional)
        serve: Run the live preview server after rendering
        host: Server bind host
        port: Server port
        envOK: Environment validation passed
        inputSourceFile: Resolved document path
        context: PreviewContext built by env_check
        convertedHtml: Transformed document
        styleResult: StyleLoadResult from the catalog
        pluginExtraction: PluginExtraction, or None without a plugin
        outputFile: Written preview page
    """

    # CLI arguments
    inputdir: Optional[Path] = field(default=None)
    outputdir: Optional[Path] = field(default=None)
    verbosity: int = field(default=1)
    inputFile: str = field(default="")
    pluginDir: Optional[str] = field(default=None)
    styleCatalog: Optional[str] = field(default=None)
    webSvcDir: Optional[str] = field(default=None)
    serve: bool = field(default=False)
    host: Optional[str] = field(default=None)
    port: Optional[int] = field(default=None)

    # Pipeline state
    envOK: bool = field(default=False)
    inputSourceFile: Path = field(default=Path("/"))
    context: Optional[Any] = field(default=None)  # PreviewContext at runtime
    convertedHtml: Optional[str] = field(default=None)
    styleResult: Optional[Any] = field(default=None)
    pluginExtraction: Optional[Any] = field(default=None)
    outputFile: Optional[Path] = field(default=None)

    @classmethod
    def state_createFromNamespace(
        cls: Type["ProgramState"], options: Namespace, inputdir: Path, outputdir: Path
    ) -> "ProgramState":
        """
        Create ProgramState from argparse Namespace and directory paths.

        Args:
            options: Parsed CLI arguments
            inputdir: Directory containing the document
            outputdir: Directory for the rendered page

        Returns:
            ProgramState instance with all CLI options as attributes
        """
        options_dict = vars(options)
        valid_fields = {f.name for f in dataclasses.fields(cls)}

        # Only keep options that are ProgramState fields
        filtered_options = {k: v for k, v in options_dict.items() if k in valid_fields}

        merged_args = {**filtered_options, "inputdir": inputdir, "outputdir": outputdir}
        return cls(**merged_args)

    def copy(self: PS) -> PS:
        """
        Creates a shallow copy of the ProgramState instance.

        Returns:
            A new ProgramState instance.
        """
        return type(self)(**self.__dict__)


def pipeline(
    initial_state: ProgramState, *stages: Callable[[ProgramState], ProgramState]
) -> ProgramState:
    """
    Execute a functional pipeline of state transformations.

    Each stage is a function (ProgramState) -> ProgramState that receives
    the output of the previous stage and returns a new state.

    Example:
        final_state = pipeline(initial_state, env_check, document_convert, page_write)

    This is equivalent to:
        page_write(document_convert(env_check(initial_state)))
    """
    return reduce(lambda state, stage: stage(state), stages, initial_state)
