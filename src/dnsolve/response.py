"""Immutable answer model built from a DoH-JSON style answer document.

Document schema (field names fixed):

    {
      "Status": int, "TC": bool?, "RD": bool?, "RA": bool?, "AD": bool?,
      "CD": bool?, "comment": str?,
      "Answer": [{"name": str, "type": int, "TTL": int, "data": str}, ...]?,
      "Question": [{"name": str, "type": int}, ...]?
    }
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Sequence, Tuple

from .parsed_records import (
    CAARecord,
    MXRecord,
    SOARecord,
    SRVRecord,
    TXTRecord,
    derive_typed,
)
from .record_types import RecordType, code_for, symbol_for


@dataclass(frozen=True)
class Record:
    """A generic answer record with its data exactly as the transport returned it."""

    name: str
    type: RecordType
    ttl: int
    data: str

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "Record":
        """
        Brief: Build a Record from one entry of the document's 'Answer' list.

        Inputs:
        - obj: mapping with 'name', 'type', 'TTL' and 'data'

        Outputs:
        - Record; negative TTLs are clamped to 0

        Example:
            >>> Record.from_json({"name": "a.", "type": 1, "TTL": 30, "data": "192.0.2.1"}).type
            <RecordType.A: 1>
        """
        return cls(
            name=str(obj.get("name", "")),
            type=symbol_for(obj.get("type", 1)),
            ttl=max(0, int(obj.get("TTL", 0) or 0)),
            data=str(obj.get("data", "")),
        )

    def to_json(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "type": code_for(self.type),
            "TTL": self.ttl,
            "data": self.data,
        }

    def to_bind(self) -> str:
        """
        Render the record as a BIND zone-file style line.

        Example:
            >>> Record("example.com.", RecordType.A, 300, "192.0.2.1").to_bind()
            'example.com.\\t300\\tIN\\tA\\t192.0.2.1'
        """
        return "\t".join(
            [self.name, str(self.ttl), "IN", self.type.name, self.data]
        )


@dataclass(frozen=True)
class Question:
    name: str
    type: RecordType

    @classmethod
    def from_json(cls, obj: Mapping[str, Any]) -> "Question":
        return cls(name=str(obj.get("name", "")), type=symbol_for(obj.get("type", 1)))

    def to_json(self) -> Dict[str, Any]:
        return {"name": self.name, "type": code_for(self.type)}


@dataclass(frozen=True)
class Answer:
    """
    Generic records plus the typed lists derived from them.

    records is None when the document carried no 'Answer' list. Each typed
    tuple is None when no record of that type contributed an entry.
    """

    records: Optional[Tuple[Record, ...]] = None
    srv: Optional[Tuple[SRVRecord, ...]] = None
    mx: Optional[Tuple[MXRecord, ...]] = None
    caa: Optional[Tuple[CAARecord, ...]] = None
    soa: Optional[Tuple[SOARecord, ...]] = None
    txt: Optional[Tuple[TXTRecord, ...]] = None

    @classmethod
    def from_records(cls, records: Optional[Sequence[Record]]) -> "Answer":
        """
        Brief: Build an Answer, deriving typed lists from the generic records.

        Inputs:
        - records: sequence of Record, or None

        Outputs:
        - Answer

        Raises:
        - SRVRecordFormatError when an SRV record is malformed
        """
        if records is None:
            return cls()
        typed = derive_typed(records)
        return cls(
            records=tuple(records),
            srv=typed.srv,
            mx=typed.mx,
            caa=typed.caa,
            soa=typed.soa,
            txt=typed.txt,
        )

    @classmethod
    def from_json(cls, items: Optional[Sequence[Mapping[str, Any]]]) -> "Answer":
        if items is None:
            return cls()
        return cls.from_records([Record.from_json(item) for item in items])

    def min_ttl(self) -> Optional[int]:
        """Smallest TTL across the generic records, or None when there are none."""
        if not self.records:
            return None
        return min(r.ttl for r in self.records)


@dataclass(frozen=True)
class ResolveResponse:
    """A decoded DNS answer. Flags are None when the transport did not report them."""

    status: int
    tc: Optional[bool] = None
    rd: Optional[bool] = None
    ra: Optional[bool] = None
    ad: Optional[bool] = None
    cd: Optional[bool] = None
    comment: Optional[str] = None
    answer: Answer = field(default_factory=Answer)
    questions: Optional[Tuple[Question, ...]] = None

    @classmethod
    def from_json(cls, doc: Mapping[str, Any]) -> "ResolveResponse":
        """
        Brief: Decode an answer document into a ResolveResponse.

        Inputs:
        - doc: mapping following the module-level schema

        Outputs:
        - ResolveResponse

        Raises:
        - SRVRecordFormatError when an SRV answer record is malformed

        Notes:
        - A missing 'Status' is treated as 0.
        """
        questions = doc.get("Question")
        return cls(
            status=int(doc.get("Status", 0) or 0),
            tc=_opt_bool(doc.get("TC")),
            rd=_opt_bool(doc.get("RD")),
            ra=_opt_bool(doc.get("RA")),
            ad=_opt_bool(doc.get("AD")),
            cd=_opt_bool(doc.get("CD")),
            comment=_opt_comment(doc.get("Comment", doc.get("comment"))),
            answer=Answer.from_json(doc.get("Answer")),
            questions=(
                None
                if questions is None
                else tuple(Question.from_json(q) for q in questions)
            ),
        )

    @property
    def records(self) -> List[Record]:
        """Generic answer records as a list (empty when absent)."""
        return list(self.answer.records or ())

    def to_json(self) -> Dict[str, Any]:
        doc: Dict[str, Any] = {"Status": self.status}
        for key, value in (
            ("TC", self.tc),
            ("RD", self.rd),
            ("RA", self.ra),
            ("AD", self.ad),
            ("CD", self.cd),
            ("comment", self.comment),
        ):
            if value is not None:
                doc[key] = value
        if self.answer.records is not None:
            doc["Answer"] = [r.to_json() for r in self.answer.records]
        if self.questions is not None:
            doc["Question"] = [q.to_json() for q in self.questions]
        return doc


def _opt_bool(value: Any) -> Optional[bool]:
    if value is None:
        return None
    return bool(value)


def _opt_comment(value: Any) -> Optional[str]:
    # Google's resolver returns 'Comment', some providers a list of strings.
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return " ".join(str(v) for v in value)
    return str(value)
