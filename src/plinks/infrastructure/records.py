"""CSV input and output for the batch pipeline."""

from __future__ import annotations

import csv
import logging
import os
from typing import Iterable, Optional, TextIO, Type, TypeVar

from pydantic import BaseModel, ValidationError

from ..application.dtos import InputRecord, PaymentInfo, PaymentLinkRecord
from ..domain.errors import (
    InputNotFoundError,
    OutputExistsError,
    OutputWriteError,
    RecordParseError,
)

logger = logging.getLogger(__name__)

INPUT_HEADER = ("name", "amount_owed", "item_ordered")
CHECK_INPUT_HEADER = ("Payment Link", "Name", "Amount")
OUTPUT_HEADER = ("Name", "Amount", "Payment Link")

RecordT = TypeVar("RecordT", bound=BaseModel)


def validate_file_paths(input_path: str, output_path: Optional[str] = None) -> None:
    """Fail before any network activity if the input is missing or the output is taken."""
    if not os.path.exists(input_path):
        raise InputNotFoundError(input_path)
    if output_path is not None and os.path.exists(output_path):
        raise OutputExistsError(output_path)


def _read_rows(
    path: str, header: tuple[str, ...], model: Type[RecordT]
) -> list[RecordT]:
    try:
        f = open(path, newline="", encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise InputNotFoundError(path) from e

    records: list[RecordT] = []
    with f:
        reader = csv.reader(f)
        try:
            columns = next(reader, None)
            if columns is None:
                return records

            missing = [name for name in header if name not in columns]
            if missing:
                raise RecordParseError(
                    path, reader.line_num, f"missing column(s) {', '.join(missing)}"
                )

            for row in reader:
                if not row:
                    continue
                if len(row) != len(columns):
                    raise RecordParseError(
                        path,
                        reader.line_num,
                        f"found record with {len(row)} fields, "
                        f"but the header has {len(columns)}",
                    )
                try:
                    records.append(model.model_validate(dict(zip(columns, row))))
                except ValidationError as e:
                    raise RecordParseError(path, reader.line_num, str(e)) from e
        except (csv.Error, UnicodeDecodeError) as e:
            raise RecordParseError(path, reader.line_num, str(e)) from e

    logger.debug("Read %d record(s) from %s", len(records), path)
    return records


def read_input_records(path: str) -> list[InputRecord]:
    """Read the creation input file, in file order."""
    return _read_rows(path, INPUT_HEADER, InputRecord)


def read_payment_link_records(path: str) -> list[PaymentLinkRecord]:
    """Read a file of previously generated payment links."""
    return _read_rows(path, CHECK_INPUT_HEADER, PaymentLinkRecord)


def open_output_file(path: str) -> TextIO:
    """Create the results file exclusively; an existing file is never overwritten."""
    try:
        return open(path, "x", newline="", encoding="utf-8")
    except FileExistsError as e:
        raise OutputExistsError(path) from e
    except OSError as e:
        raise OutputWriteError(f"Cannot create output file {path}: {e}") from e


def write_payment_rows(f: TextIO, payment_infos: Iterable[PaymentInfo]) -> int:
    """Write the header and one row per result into an open file."""
    count = 0
    writer = csv.writer(f)
    try:
        writer.writerow(OUTPUT_HEADER)
        for info in payment_infos:
            writer.writerow((info.name, info.amount, info.payment_link))
            count += 1
    except OSError as e:
        raise OutputWriteError(f"Cannot write output file {f.name}: {e}") from e

    logger.info("Wrote %d payment link(s) to %s", count, f.name)
    return count


def write_payment_infos(path: str, payment_infos: Iterable[PaymentInfo]) -> int:
    """Write the results file and return the number of rows written."""
    with open_output_file(path) as f:
        return write_payment_rows(f, payment_infos)
