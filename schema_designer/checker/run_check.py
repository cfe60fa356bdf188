#!/usr/bin/env python3
# Copyright 2026 TIER IV, inc.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.

"""CLI entry point for checking schema notation files."""

import argparse
import json
import sys
from pathlib import Path
from typing import List, Optional

from . import check_files, CheckResult
from ..compiler.compiler_config import CompilerConfig

NOTATION_EXTENSION = '.schema.yaml'


def find_notation_files(paths: List[str]) -> List[Path]:
    """Find all schema notation YAML files in given paths."""
    notation_files = []

    for path_str in paths:
        path = Path(path_str)

        if not path.exists():
            print(f"Warning: Path does not exist: {path}", file=sys.stderr)
            continue

        if path.is_file():
            if path.name.endswith(NOTATION_EXTENSION):
                notation_files.append(path)
            else:
                print(f"Warning: File does not match notation file pattern: {path}", file=sys.stderr)
        elif path.is_dir():
            notation_files.extend(path.rglob(f'*{NOTATION_EXTENSION}'))
        else:
            print(f"Warning: Path is neither file nor directory: {path}", file=sys.stderr)

    return sorted(set(notation_files))


def print_results(results: List[CheckResult], output_format: str) -> None:
    if output_format == 'json':
        output = {
            'files': len(results),
            'errors': sum(len(r.errors) for r in results),
            'warnings': sum(len(r.warnings) for r in results),
            'results': [r.to_dict() for r in results],
        }
        print(json.dumps(output, indent=2))
    elif output_format == 'github-actions':
        for result in results:
            for error in result.errors:
                # Workflow commands are single line.
                message = error['message'].replace('\n', '%0A')
                print(f"::error file={result.file_path},line={error.get('line', 1)}::{message}")
            for warning in result.warnings:
                message = warning['message'].replace('\n', '%0A')
                print(f"::warning file={result.file_path},line={warning.get('line', 1)}::{message}")
    else:  # human-readable
        for result in results:
            if result.errors or result.warnings:
                print(f"\n{result.file_path}:")
                for error in result.errors:
                    line_info = f":{error['line']}" if 'line' in error else ""
                    rule_info = f" [{error['rule']}]" if 'rule' in error else ""
                    print(f"  ERROR{line_info}{rule_info}: {error['message']}")
                for warning in result.warnings:
                    line_info = f":{warning['line']}" if 'line' in warning else ""
                    print(f"  WARNING{line_info}: {warning['message']}")


def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the checker CLI."""
    parser = argparse.ArgumentParser(
        description='Compile schema notation files and report schema errors',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        'paths',
        nargs='*',
        default=None,
        help='File paths or directories to check (default: current directory)',
    )
    parser.add_argument(
        '--format',
        choices=['human', 'json', 'github-actions'],
        default='human',
        help='Output format (default: human)',
    )
    parser.add_argument(
        '--strict-format-version',
        action='store_true',
        help='Reject files whose format minor version is newer than supported',
    )

    args = parser.parse_args(argv)

    if not args.paths:
        args.paths = ['.']

    config = CompilerConfig.from_env()
    if args.strict_format_version:
        config.strict_format_version = True
    if args.format != 'human':
        # Keep stdout machine readable.
        config.print_level = 'DEBUG'
    config.set_logging()

    notation_files = find_notation_files(args.paths)

    if not notation_files:
        print("No schema notation files found.", file=sys.stderr)
        sys.exit(1)

    results = check_files(notation_files, config=config)
    print_results(results, args.format)

    # Exit with error code if any errors found
    total_errors = sum(len(r.errors) for r in results)
    if total_errors > 0:
        sys.exit(1)
    if args.format == 'human':
        print(f"Checked {len(results)} file(s) with no errors.")
    sys.exit(0)


if __name__ == '__main__':
    main()
