import json
import requests
from flask import current_app
from .report_image import render_absentee_table


def build_report_message(display_date, absent_count, spreadsheet_url=None, recipient=None):
    lines = [
        f"Hello{', ' + recipient if recipient else ''}.",
        f"Here is the morning study hall attendance for {display_date}.",
        f"Absence notices were sent to {absent_count} students and their parents.",
    ]
    if spreadsheet_url:
        lines.append(f"[Study hall attendance sheet] {spreadsheet_url}")
    lines.append("Thank you.")
    return "\n".join(lines)


def send_discord_report(message, display_date, absentees, notice=None):
    """Posts the report message with the absentee table PNG to the webhook.

    Returns {"success": True} or {"success": False, "error": ...}.
    """
    webhook_url = current_app.config.get("DISCORD_WEBHOOK_URL")
    if not webhook_url:
        return {"success": False, "error": "Discord webhook is not configured."}

    png = render_absentee_table(display_date, absentees, notice,
                                font_path=current_app.config.get("REPORT_FONT_PATH"))
    payload = {"content": message}
    try:
        response = requests.post(
            webhook_url,
            data={"payload_json": json.dumps(payload)},
            files={"file": ("attendance.png", png, "image/png")},
            timeout=current_app.config.get("HTTP_TIMEOUT_SECONDS", 15),
        )
        response.raise_for_status()
    except requests.RequestException as e:
        current_app.logger.error("Discord report failed: %s", e)
        return {"success": False, "error": str(e)}

    return {"success": True}
