"""Command line entry point: import, export and serve."""

import argparse
import json
import logging
import os
import shutil
import sys

from surveyport.config import load_config, merge_cli_args
from surveyport.converters.csv import SHEET_TYPES
from surveyport.converters.export import render_workbook
from surveyport.importer import ImportService
from surveyport.issues import ImportRejected
from surveyport.store import JsonStore, StoreError
from surveyport.web.upload import staged_filename

logger = logging.getLogger(__name__)


def cmd_import(args, config, store):
    """Import a file; the source file is copied to staging and left untouched."""
    if not os.path.isfile(args.file):
        print(f"Error: file not found: {args.file}")
        sys.exit(1)

    os.makedirs(config.upload_dir, exist_ok=True)
    staged = os.path.join(config.upload_dir, staged_filename(os.path.basename(args.file)))
    shutil.copyfile(args.file, staged)

    service = ImportService(store, config)
    try:
        result = service.import_file(
            staged,
            filename=os.path.basename(args.file),
            overwrite=args.overwrite,
            sheet_type=args.sheet_type,
        )
    except ImportRejected as e:
        print(str(e.issue), file=sys.stderr)
        print(json.dumps(e.to_dict(), indent=2, ensure_ascii=False))
        sys.exit(1)

    print(
        f"Imported {result.surveys_imported} survey(s) and "
        f"{result.questions_imported} question(s)"
        + (" (overwrite)" if result.overwrite else "")
    )


def cmd_export(args, config, store):
    survey = store.get_survey(args.survey_id)
    if survey is None:
        print(f"Error: survey not found: {args.survey_id}")
        sys.exit(1)

    output = args.output or f"{args.survey_id}_dump.xlsx"
    with open(output, "wb") as f:
        f.write(render_workbook(survey, store.get_questions(args.survey_id)))
    print(f"Wrote {output}")


def cmd_serve(args, config, store):
    from surveyport.web.app import create_app

    app = create_app(config, store)
    app.run(host=args.host, port=args.port)


def build_parser():
    parser = argparse.ArgumentParser(
        description="surveyport: import and export Survey Master / Question Master data"
    )
    parser.add_argument("--config-dir", default=".", help="Directory holding .surveyportrc.json")
    parser.add_argument("--store", help="Path to the store JSON document")
    parser.add_argument("--upload-dir", help="Staging directory for imports")
    parser.add_argument("--log-level", help="Logging level (default from config: INFO)")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    parser_import = subparsers.add_parser("import", help="Import a workbook or CSV/TSV file")
    parser_import.add_argument("file", help="Path to .xlsx, .csv or .tsv file")
    parser_import.add_argument(
        "--overwrite", action="store_true", help="Replace surveys whose IDs already exist"
    )
    parser_import.add_argument(
        "--sheet-type",
        choices=sorted(SHEET_TYPES),
        default="both",
        help="Record kind of a text file (default: infer from headers)",
    )
    parser_import.add_argument(
        "--verify-source-questions",
        action="store_true",
        help="Require child questions' Source Question to exist",
    )

    parser_export = subparsers.add_parser("export", help="Export one survey to a workbook")
    parser_export.add_argument("survey_id", help="Survey ID")
    parser_export.add_argument("-o", "--output", help="Output .xlsx path")

    parser_serve = subparsers.add_parser("serve", help="Run the HTTP interface")
    parser_serve.add_argument("--host", default="127.0.0.1")
    parser_serve.add_argument("--port", type=int, default=5000)

    return parser


COMMANDS = {
    "import": cmd_import,
    "export": cmd_export,
    "serve": cmd_serve,
}


def main(argv=None):
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        sys.exit(1)

    config = merge_cli_args(load_config(args.config_dir), args)
    logging.basicConfig(
        level=getattr(logging, config.log_level, logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
    )

    with JsonStore(config.store_path) as store:
        try:
            COMMANDS[args.command](args, config, store)
        except StoreError as e:
            logger.error("%s", e)
            sys.exit(1)


if __name__ == "__main__":
    main()
