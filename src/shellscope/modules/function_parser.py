"""Shell function definition parsing."""

import logging
from collections.abc import Sequence

from shellscope.models import FunctionEntry, Origin, RawStatement, StatementKind
from shellscope.modules.doc_extractor import DocExtractor
from shellscope.modules.tokenizer import match_function_head
from shellscope.modules.usage_inferencer import UsageInferencer

logger = logging.getLogger(__name__)


class FunctionParser:
    """Build FunctionEntry records from FUNCTION statements.

    Documentation comes from the comment block above the head; when it gives
    no usage, the usage is inferred from the body.
    """

    def __init__(
        self,
        doc_extractor: DocExtractor | None = None,
        usage_inferencer: UsageInferencer | None = None,
    ):
        self.doc_extractor = doc_extractor or DocExtractor()
        self.usage_inferencer = usage_inferencer or UsageInferencer()

    def parse(
        self, statement: RawStatement, origin: Origin, lines: Sequence[str]
    ) -> FunctionEntry | None:
        """Parse one statement.

        Args:
            statement: Segmented statement
            origin: Origin of the enclosing file
            lines: All lines of the file, used for the comment block

        Returns:
            FunctionEntry, or None when the statement is not a valid definition
        """
        if statement.kind is not StatementKind.FUNCTION:
            return None

        head = match_function_head(statement.text.split("\n", 1)[0])
        if head is None:
            logger.debug(f"Rejected function head at line {statement.start_line}")
            return None

        body = statement.body
        docs = self.doc_extractor.extract(lines, statement.start_line, head.name)
        usage = docs.usage or self.usage_inferencer.infer(head.name, body)

        return FunctionEntry(
            name=head.name,
            description=docs.description,
            usage=usage,
            body=body,
            origin=origin,
            start_line=statement.start_line,
            end_line=statement.end_line,
        )

    def parse_all(
        self, statements: Sequence[RawStatement], origin: Origin, lines: Sequence[str]
    ) -> list[FunctionEntry]:
        """Parse every FUNCTION statement; a redefinition replaces the earlier one.

        The surviving entry keeps the position of the first definition.
        """
        by_name: dict[str, FunctionEntry] = {}
        for statement in statements:
            entry = self.parse(statement, origin, lines)
            if entry is None:
                continue
            if entry.name in by_name:
                logger.debug(
                    f"Function {entry.name} redefined at line {entry.start_line} "
                    f"in {origin.display_name}"
                )
            by_name[entry.name] = entry
        return list(by_name.values())


__all__ = ["FunctionParser"]
