"""Report Formatting - Pure functions turning report data into plaintext.

All functions are pure: the same report always formats to the same bytes.
"""

from datetime import datetime

from .models import FootprintReport


def format_number(value: float) -> str:
    """Format a raw input amount without a trailing .0 for whole numbers."""
    if float(value).is_integer():
        return str(int(value))
    return f"{value:g}"


def report_filename(generated_at: datetime) -> str:
    return f"EcoTrack-Report-{generated_at.date().isoformat()}.txt"


def _status_line(report: FootprintReport, achieved: str, over: str) -> str:
    return achieved if report.target_achieved else over


def format_text_report(report: FootprintReport) -> str:
    """Format the full downloadable report.

    Args:
        report: Report data from EcoTracker.build_report

    Returns:
        Plaintext report ending with a newline
    """
    breakdown = report.breakdown
    form = report.form
    generated = report.generated_at

    sections = [
        "=== ECOTRACK CARBON FOOTPRINT REPORT ===\n"
        f"Generated: {generated.strftime('%Y-%m-%d')} at {generated.strftime('%H:%M:%S')}",
        "CURRENT STATUS:\n"
        f"- Today's Carbon Footprint: {breakdown.total:.1f} kg CO₂\n"
        f"- Personal Target: {format_number(report.personal_target)} kg CO₂ per day\n"
        f"- Target Status: {_status_line(report, '✅ ACHIEVED', '❌ OVER TARGET')}",
        "TODAY'S BREAKDOWN:\n"
        f"- Transport: {breakdown.transport:.1f} kg CO₂ ({format_number(form.distance_km)} km traveled)\n"
        f"- Electricity: {breakdown.electricity:.1f} kg CO₂ ({format_number(form.electricity_kwh)} kWh used)\n"
        f"- Diet: {breakdown.diet:.1f} kg CO₂ ({form.diet_type.value} diet)",
    ]

    week_lines = [
        f"{day.day_label}: {day.footprint:.1f} kg CO₂{' ⭐' if day.star else ''}"
        for day in report.week
    ]
    week_lines.append(f"- Weekly Average: {report.weekly_average:.1f} kg CO₂")
    sections.append("WEEKLY PROGRESS:\n" + "\n".join(week_lines))

    achievements = report.achievements
    sections.append(
        "ACHIEVEMENTS:\n"
        f"- Days Tracked: {achievements.days_tracked}\n"
        f"- CO₂ Reduction: {achievements.total_reduction_pct:.0f}%\n"
        f"- Green Days: {achievements.green_days_count}"
    )

    if report.badges:
        sections.append(
            "TODAY'S BADGES:\n"
            + "\n".join(f"{b.emoji} {b.title}: {b.description}" for b in report.badges)
        )

    sections.append("ECO TIPS:\n" + "\n".join(f"• {tip}" for tip in report.tips))

    if report.history:
        sections.append(
            "RECENT HISTORY:\n"
            + "\n".join(
                f"{e.entry_date.isoformat()}: {e.footprint:.1f} kg CO₂ "
                f"({format_number(e.distance_km)}km, {format_number(e.electricity_kwh)}kWh, "
                f"{e.diet_type.value})"
                for e in report.history
            )
        )
    else:
        sections.append("No history data available yet.")

    sections.append("=== END OF REPORT ===")

    return "\n\n".join(sections) + "\n"


def format_clipboard_summary(report: FootprintReport) -> str:
    """Format the short summary meant for pasting into chats or notes."""
    breakdown = report.breakdown
    form = report.form
    achievements = report.achievements

    lines = [
        f"=== ECOTRACK REPORT ({report.generated_at.strftime('%Y-%m-%d')}) ===",
        "",
        f"Today's Carbon Footprint: {breakdown.total:.1f} kg CO₂",
        f"Personal Target: {format_number(report.personal_target)} kg CO₂",
        f"Status: {_status_line(report, '✅ Target Achieved', '❌ Over Target')}",
        "",
        "Breakdown:",
        f"• Transport: {breakdown.transport:.1f} kg CO₂ ({format_number(form.distance_km)} km)",
        f"• Electricity: {breakdown.electricity:.1f} kg CO₂ ({format_number(form.electricity_kwh)} kWh)",
        f"• Diet: {breakdown.diet:.1f} kg CO₂ ({form.diet_type.value})",
        "",
        "Weekly Progress:",
        ", ".join(f"{day.day_label}: {day.footprint:.1f} kg" for day in report.week),
        f"Average: {report.weekly_average:.1f} kg CO₂",
        "",
        f"Achievements: {achievements.days_tracked} days tracked, "
        f"{achievements.green_days_count} green days",
    ]

    if report.badges:
        lines.append("")
        lines.append("Today's Badges: " + ", ".join(b.title for b in report.badges))

    return "\n".join(lines) + "\n"
