#!/usr/bin/env python3
"""
orfalius - Annotated markdown to course pages and synchronized slides

Compiles a tree of annotated markdown documents into a static site of
themed HTML pages, copying images, videos and other static files along.

Philosophy:
    - Text-first: notes stay readable markdown
    - Directive blocks (!!! ??? ::: ´´´ ;;; ||| ///////  ++++) for structure
    - Paragraph sigils (^ ! : ; @ % &) for media and emphasis
    - One .md source -> one .html page at the same relative path

Usage:
    orfalius inputdir/ outputdir/

    Every *.md file below inputdir/ is compiled; *.mds files are include-only
    snippets; everything else is copied verbatim.

Examples:
    # Build a site
    orfalius notes/ site/

    # With another theme
    orfalius notes/ site/ --theme dark --themesDir ~/themes

    # Verbose output
    orfalius notes/ site/ -vv
"""

import shutil
import sys
from pathlib import Path
from argparse import ArgumentParser, ArgumentDefaultsHelpFormatter
from typing import List, Optional

from .config import appsettings
from .lib import DocumentCompiler, IncludeError, StructureError, Theme, ThemeError, __version__, LOG, state_connectToLogger
from .lib.theme import themes_listAvailable
from .models import ProgramState, pipeline


# Define CLI arguments
parser = ArgumentParser(
    description="orfalius - Annotated markdown to course pages and synchronized slides",
    formatter_class=ArgumentDefaultsHelpFormatter,
)

parser.add_argument("inputdir", type=Path, help="Directory containing the documents")

parser.add_argument("outputdir", type=Path, help="Directory where the site will be written")

parser.add_argument(
    "--theme",
    default=appsettings.default_theme,
    type=str,
    help="Theme used to render the pages",
)

parser.add_argument(
    "--themesDir",
    default=None,
    type=str,
    help="Directory containing theme folders. Defaults to the packaged themes/ dir",
)

parser.add_argument(
    "-v",
    "--verbosity",
    action="count",
    default=1,
    help="Increase output verbosity (can be repeated: -v, -vv)",
)

parser.add_argument("-V", "--version", action="version", version=f"%(prog)s {__version__}")


def env_check(inputstate: ProgramState) -> ProgramState:
    """
    Validate environment and load the theme.

    Args:
        inputstate: Initial program state with CLI options

    Returns:
        ProgramState with added fields:
            - themeObj: Loaded Theme
            - envOK: True if environment is valid

    Exits:
        1 if the input directory or the theme is missing
    """

    state = inputstate.copy()

    LOG("Checking environment...", level=2)

    if not state.inputdir.is_dir():
        print(f"Error: Input directory not found: {state.inputdir}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    try:
        state.themeObj = Theme(state.theme, state.themesDir)
    except ThemeError as e:
        print(f"Error: {e}", file=sys.stderr)
        available = themes_listAvailable(state.themesDir)
        if available:
            print(f"Available themes: {', '.join(available)}", file=sys.stderr)
        state.envOK = False
        sys.exit(1)

    LOG(f"Theme: {state.themeObj}", level=2)

    state.outputdir.mkdir(parents=True, exist_ok=True)
    LOG(f"Output directory: {state.outputdir}", level=2)

    state.envOK = True
    return state


def sources_discover(inputstate: ProgramState) -> ProgramState:
    """
    Find the documents to compile.

    Returns:
        ProgramState with added field:
            - sourceFiles: Sorted source paths relative to inputdir
    """

    state = inputstate.copy()

    state.sourceFiles = sorted(
        path.relative_to(state.inputdir)
        for path in state.inputdir.rglob(f"*{appsettings.source_suffix}")
        if path.is_file()
    )
    LOG(f"Found {len(state.sourceFiles)} document(s)", level=1)
    return state


def documents_compile(inputstate: ProgramState) -> ProgramState:
    """
    Compile every document to its page.

    A failing document is reported and skipped; the others still compile.

    Returns:
        ProgramState with added fields:
            - compiledFiles: Written pages relative to outputdir
            - failedFiles: Source path -> failure message
    """

    state = inputstate.copy()
    state.compiledFiles = []
    state.failedFiles = {}

    compiler = DocumentCompiler(state.themeObj)

    for relative in state.sourceFiles:
        LOG(f"Compiling {relative}", level=2)
        try:
            document = compiler.file_compile(state.inputdir / relative, state.inputdir)
        except (StructureError, IncludeError, OSError, UnicodeDecodeError) as e:
            message = f"{type(e).__name__}: {e}"
            print(f"Error compiling {relative}: {message}", file=sys.stderr)
            state.failedFiles[str(relative)] = message
            continue

        output = state.outputdir / document.path
        output.parent.mkdir(parents=True, exist_ok=True)
        output.write_text(document.html, encoding="utf-8")
        state.compiledFiles.append(document.path)
        LOG(f"Wrote {output}", level=3)

    return state


def statics_copy(inputstate: ProgramState) -> ProgramState:
    """
    Copy static files and theme assets to the site.

    Everything below inputdir that is neither a document nor a snippet is
    copied to the same relative path; the theme's asset folders go to the
    site root, next to the Pygments stylesheet.

    Returns:
        ProgramState with added field:
            - copiedFiles: Number of static files copied
    """

    state = inputstate.copy()
    skipped = {appsettings.source_suffix, appsettings.snippet_suffix}

    count = 0
    for path in sorted(state.inputdir.rglob("*")):
        if not path.is_file() or path.suffix in skipped:
            continue
        target = state.outputdir / path.relative_to(state.inputdir)
        target.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(path, target)
        count += 1
    state.copiedFiles = count
    LOG(f"Copied {count} static file(s)", level=2)

    for folder in state.themeObj.assetDirs_get():
        shutil.copytree(folder, state.outputdir / folder.name, dirs_exist_ok=True)
        LOG(f"Copied theme {folder.name}/ to output", level=3)

    stylesheet = state.outputdir / "css" / "pygments.css"
    stylesheet.parent.mkdir(parents=True, exist_ok=True)
    stylesheet.write_text(state.themeObj.pygmentsCSS_get(), encoding="utf-8")

    return state


def results_report(inputstate: ProgramState) -> ProgramState:
    """
    Display build results to user.

    Returns:
        ProgramState unchanged (terminal pipeline stage)

    Exits:
        1 if any document failed to compile
    """
    state: ProgramState = inputstate.copy()

    LOG(f"Pages: {len(state.compiledFiles)}", level=1)
    LOG(f"Static files: {state.copiedFiles}", level=1)

    if state.failedFiles:
        print(f"Error: {len(state.failedFiles)} document(s) failed:", file=sys.stderr)
        for relative, message in state.failedFiles.items():
            print(f"  {relative}: {message}", file=sys.stderr)
        sys.exit(1)

    LOG(f"✓ Site written to {state.outputdir}", level=1)
    return state


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point - build a site from a tree of annotated markdown.

    Orchestrates the build pipeline:
        1. env_check: Validate paths, load the theme
        2. sources_discover: Find *.md documents
        3. documents_compile: Compile each document to its page
        4. statics_copy: Copy static files and theme assets
        5. results_report: Summarise, fail on any failed document

    Args:
        argv: Command line arguments (default: sys.argv[1:])
            - inputdir: Directory containing the documents
            - outputdir: Directory where the site will be written
            - theme: str - Theme name
            - themesDir: Optional[str] - Directory holding themes
            - verbosity: int - Logging verbosity level (1-3)
    """

    options = parser.parse_args(argv)
    state: ProgramState = ProgramState.state_createFromNamespace(
        options=options, inputdir=options.inputdir, outputdir=options.outputdir
    )

    # Connect state to logger for entire pipeline
    state_connectToLogger(state)

    pipeline(state, env_check, sources_discover, documents_compile, statics_copy, results_report)


if __name__ == "__main__":
    main()
