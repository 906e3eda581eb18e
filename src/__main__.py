#!/usr/bin/env python3
"""
rodixpreview - Live preview for RodiX component documents

Renders a RodiX UI document the way the plugin runtime would show it:
custom component tags become standard HTML, the product's component
stylesheets are compiled in, the plugin's event handlers are wired to the
page, and a client-side emulator reproduces the runtime's widget behavior.

As an aside, this codebase leverages the ChRIS "plugin" concept/pattern as
general purpose python app development framework.

Usage:
    rodixpreview inputdir/ outputdir/ --inputFile PIDTuningWidgetNode.html

    The rendered page is written to outputdir/index.html. With --serve the
    live preview server starts afterwards and reloads the browser tab when
    the document, a stylesheet source or the plugin source changes.

Examples:
    # One-shot render
    rodixpreview htmlStore/ out/ --inputFile PIDTuningWidgetNode.html

    # With the plugin behavior and a checkout's style sources
    rodixpreview htmlStore/ out/ --inputFile PIDTuningWidgetNode.html \\
        --pluginDir plugins/PID_Tuning --webSvcDir /work/v3/src/rodi/code/services/rodi-web-svc/src

    # Live preview
    rodixpreview htmlStore/ out/ --inputFile PIDTuningWidgetNode.html --serve --port 3333 -vv
"""

import sys
from pathlib import Path
from argparse import ArgumentParser, Namespace, ArgumentDefaultsHelpFormatter
from typing import Any, Dict

from chris_plugin import chris_plugin
from .config import appsettings
from .lib import (
    CatalogError,
    ConversionError,
    DocumentNotFoundError,
    LOG,
    PreviewContext,
    __version__,
    preview_serve,
    state_connectToLogger,
)
from .models import ProgramState, pipeline


DISPLAY_TITLE = r"""
                _ _                                _
  _ __ ___   __| (_)_  __  _ __  _ __ _____   ___(_) _____      __
 | '__/ _ \ / _` | \ \/ / | '_ \| '__/ _ \ \ / / | |/ _ \ \ /\ / /
 | | | (_) | (_| | |>  <  | |_) | | |  __/\ V /  | |  __/\ V  V /
 |_|  \___/ \__,_|_/_/\_\ | .__/|_|  \___| \_/   |_|\___| \_/\_/
                          |_|
  Live preview for RodiX component documents
"""

# Define CLI arguments
parser = ArgumentParser(
    description="rodixpreview - Live preview for RodiX component documents",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument(
    "--inputFile",
    default=appsettings.html_file,
    type=str,
    help="RodiX document (relative to inputdir)",
)

parser.add_argument(
    "--pluginDir",
    default=None,
    type=str,
    help="Plugin directory holding the *Contribution.js behavior source",
)

parser.add_argument(
    "--styleCatalog",
    default=None,
    type=str,
    help="Style catalog YAML. Defaults to the packaged catalog",
)

parser.add_argument(
    "--webSvcDir",
    default=None,
    type=str,
    help="Root the style catalog paths are relative to. Defaults to the configured web service src/",
)

parser.add_argument(
    "--serve",
    action="store_true",
    default=False,
    help="Start the live preview server after rendering",
)

parser.add_argument("--host", default=appsettings.host, type=str, help="Preview server host")

parser.add_argument("--port", default=appsettings.port, type=int, help="Preview server port")

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv, -vvv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def settings_override(state: ProgramState) -> Dict[str, Any]:
    """CLI options that replace their settings counterparts"""
    overrides: Dict[str, Any] = {
        'html_folder': state.inputdir,
        'html_file': state.inputFile,
        'host': state.host,
        'port': state.port,
    }
    if state.pluginDir:
        overrides['plugin_dir'] = Path(state.pluginDir)
    if state.styleCatalog:
        overrides['style_catalog'] = Path(state.styleCatalog)
    if state.webSvcDir:
        overrides['web_svc_dir'] = Path(state.webSvcDir)
    return {key: value for key, value in overrides.items() if value is not None}


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and build the preview context.

    Verifies that the document exists, loads the style catalog and creates
    the output directory.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - inputSourceFile: Resolved document path
            - context: PreviewContext for the remaining stages
            - envOK: True if environment is valid

    Exits:
        1 if the document is missing or the style catalog cannot be read
    """

    state = inputstate.copy()

    if state.verbosity >= 2:
        LOG(DISPLAY_TITLE, level=2)

    LOG("Checking environment...", level=2)

    input_file = state.inputdir / state.inputFile
    if not input_file.exists():
        print(f"Error: Input file not found: {input_file}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    state.inputSourceFile = input_file
    LOG(f"Input file: {input_file}", level=2)

    settings = appsettings.model_copy(update=settings_override(state))
    for problem in settings.paths_validate():
        LOG(problem, level=2)

    try:
        state.context = PreviewContext(settings, document_path=input_file)
    except CatalogError as e:
        print(f"Style catalog error: {e}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    LOG(f"Style catalog: {len(state.context.catalog)} entries", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def document_convert(inputstate: ProgramState) -> ProgramState:
    """
    Convert the RodiX document to standard HTML.

    Returns:
        ProgramState with added field:
            - convertedHtml: Transformed document

    Exits:
        1 if the document cannot be read or the conversion fails
    """

    state = inputstate.copy()

    LOG("Converting document...", level=1)
    try:
        state.convertedHtml = state.context.document_convert()
    except (DocumentNotFoundError, ConversionError) as e:
        print(f"Conversion error: {e}", file=sys.stderr)
        if state.verbosity >= 3 and state.context.stats.errors:
            LOG(state.context.stats.errors[-1].stack, level=3)
        sys.exit(1)

    report = state.context.converter.last_report
    LOG(f"Rewrote {report.total} custom tags", level=2)
    return state


def styles_resolve(inputstate: ProgramState) -> ProgramState:
    """
    Compile the style catalog.

    Returns:
        ProgramState with added field:
            - styleResult: StyleLoadResult (entries that failed are listed, not fatal)
    """

    state = inputstate.copy()

    LOG("Resolving component styles...", level=1)
    state.styleResult = state.context.styles_load()
    for error in state.styleResult.errors:
        LOG(f"  {error.name}: {error.error}", level=2)
    return state


def plugin_extract(inputstate: ProgramState) -> ProgramState:
    """
    Extract the plugin's event bindings and handlers.

    Returns:
        ProgramState with added field:
            - pluginExtraction: PluginExtraction, or None without a plugin
    """

    state = inputstate.copy()

    if state.context.plugin_loader is None:
        LOG("No plugin directory configured", level=2)
        return state

    LOG("Extracting plugin behavior...", level=1)
    state.pluginExtraction = state.context.plugin_reload()
    return state


def page_write(inputstate: ProgramState) -> ProgramState:
    """
    Assemble the static preview page and write it to outputdir.

    Returns:
        ProgramState with added field:
            - outputFile: Path of the written page
    """

    state = inputstate.copy()

    context = state.context
    page = context.assembler.page_build(
        converted_html=state.convertedHtml,
        styles_text=state.styleResult.text,
        emulator_js=context.emulator.bundle(),
        plugin_js=context.plugin_script(),
        source_file=state.inputSourceFile,
        styles_loaded=state.styleResult.loaded,
        live=False,
    )

    state.outputFile = state.outputdir / "index.html"
    state.outputFile.write_text(page, encoding="utf-8")
    LOG(f"Wrote {state.outputFile}", level=2)
    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display rendering results to user.

    Returns:
        ProgramState unchanged
    """
    state: ProgramState = inputstate.copy()

    stats = state.context.converter.stats_get()
    LOG("\n✓ Preview rendered!", level=1)
    LOG(f"  Output: {state.outputFile}", level=1)
    LOG(f"  Custom tags rewritten: {state.context.converter.last_report.total}", level=1)
    LOG(f"  Styles: {state.styleResult.loaded} loaded, {len(state.styleResult.errors)} failed", level=1)
    if state.pluginExtraction is not None:
        summary = state.pluginExtraction.summary()
        LOG(
            f"  Plugin: {summary['contributionFile']} "
            f"({summary['eventBindings']} bindings, {summary['handlers']} handlers)",
            level=1,
        )
    LOG(f"  Conversions: {stats['totalConversions']}", level=2)
    return state


def server_run(inputstate: ProgramState) -> ProgramState:
    """
    Run the live preview server when --serve is given.

    Blocks until interrupted.

    Returns:
        ProgramState unchanged
    """
    state: ProgramState = inputstate.copy()
    if not state.serve:
        return state

    state.context.watch_start()
    preview_serve(state.context, state.host, state.port)
    return state


@chris_plugin(
    parser=parser,
    title="rodixpreview - Live preview for RodiX component documents",
    category="Visualization",
    min_memory_limit="100Mi",
    min_cpu_limit="500m",
)
def main(options: Namespace, inputdir: Path, outputdir: Path):
    """
    Main entry point - render a RodiX document, optionally serve it live.

    Orchestrates the pipeline:
        1. env_check: Validate paths, build the preview context
        2. document_convert: RodiX document -> standard HTML
        3. styles_resolve: Compile the component style catalog
        4. plugin_extract: Recover the plugin's handlers and bindings
        5. page_write: Write the static preview page
        6. results_report: Display results to user
        7. server_run: Live preview server (with --serve)

    Args:
        options: CLI arguments from argparse
        inputdir: Directory containing the RodiX document
        outputdir: Directory where the rendered page will be written

    Note:
        This function is wrapped by @chris_plugin which handles CLI
        argument parsing and invokes this function with parsed values.
    """

    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=inputdir, outputdir=outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(
        state,
        env_check,
        document_convert,
        styles_resolve,
        plugin_extract,
        page_write,
        results_report,
        server_run,
    )


if __name__ == "__main__":
    main()  # type: ignore  # @chris_plugin decorator transforms signature
