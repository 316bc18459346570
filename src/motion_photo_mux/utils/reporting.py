"""問題清單與執行摘要輸出工具。"""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Iterable

from ..models import BatchResult, ProcessError

DEFAULT_REPORT_NAME = "problem_files.txt"


def write_problem_report(
    output_root: Path,
    problems: Iterable[ProcessError],
    *,
    report_name: str = DEFAULT_REPORT_NAME,
) -> Path | None:
    """問題清單非空時寫出純文字報告，每行 ``路徑<TAB>代碼<TAB>訊息``。"""
    items = list(problems)
    if not items:
        return None
    output_root.mkdir(parents=True, exist_ok=True)
    report_path = output_root / report_name
    lines = [item.to_report_line() for item in items]
    report_path.write_text("\n".join(lines) + "\n", encoding="utf-8")
    return report_path


def read_problem_report(report_path: Path) -> list[tuple[str, str, str]]:
    rows: list[tuple[str, str, str]] = []
    if not report_path.exists():
        return rows
    for line in report_path.read_text(encoding="utf-8").splitlines():
        if not line.strip():
            continue
        parts = line.split("\t", 2)
        while len(parts) < 3:
            parts.append("")
        rows.append((parts[0], parts[1], parts[2]))
    return rows


def build_summary_text(result: BatchResult, *, source: str, output_root: Path) -> str:
    lines = [
        "=== motion-photo-mux 執行摘要 ===",
        f"執行時間: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}",
        f"來源: {source}",
        f"輸出目錄: {output_root}",
        "",
        f"配對數: {len(result.outcomes)}",
        f"成功: {len(result.succeeded)}",
        f"失敗或略過: {len(result.failed)}",
        f"未配對檔案: {len(result.unmatched)}",
    ]
    if result.cancelled:
        lines.append(f"已取消: {len(result.cancelled)}")
    if result.converted:
        lines.append(f"僅轉檔: {len(result.converted)}")
    if result.relocated:
        lines.append(f"移至其他資料夾: {len(result.relocated)}")
    if result.copied:
        lines.append(f"直接複製: {len(result.copied)}")
    if result.deleted:
        lines.append(f"已刪除來源: {len(result.deleted)}")
    if result.report_path is not None:
        lines.append(f"問題清單: {result.report_path}")
    return "\n".join(lines) + "\n"
