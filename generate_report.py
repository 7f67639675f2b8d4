"""
Build the diabetes report and write it as HTML.

Source and output path come from CONFIG ('data.source', 'report.output_path'),
which PIMAREPORT_DATA_SOURCE / PIMAREPORT_REPORT_OUTPUT_PATH can override.
"""

from pathlib import Path

from config import CONFIG
from diabetes_report.rendering import render_html
from diabetes_report.reporting import generate_report
from logger import LoggerFactory, get_logger

logger = get_logger(__name__)


def main() -> Path:
    is_valid, errors = CONFIG.validate()
    if not is_valid:
        raise ValueError("Invalid configuration: " + "; ".join(errors))

    report = generate_report()
    output_path = Path(CONFIG.get("report.output_path", "report.html"))
    output_path.write_text(render_html(report), encoding="utf-8")

    logger.log_operation("write_report", "completed", path=output_path)
    LoggerFactory.get_performance_logger().print_summary()
    return output_path


if __name__ == "__main__":
    main()
