"""
Email Templates Module

HTML building blocks for report emails. Every interpolated value is escaped.
"""

from datetime import date
from html import escape
from typing import Dict, List, Optional, Tuple

from contacts_report.contacts.models import Contact, Label
from contacts_report.types import ContactStats

FOOTER_LINKS = (
    ("Manage Contacts", "https://contacts.google.com"),
)

STYLES = """
  .email-container {
    font-family: -apple-system, BlinkMacSystemFont, 'Segoe UI', Roboto, sans-serif;
    max-width: 600px;
    margin: 0 auto;
    padding: 20px;
    background-color: #ffffff;
    border-radius: 8px;
    box-shadow: 0 2px 4px rgba(0,0,0,0.1);
  }
  .header { text-align: center; margin-bottom: 30px; }
  .title { color: #1a1a1a; font-size: 24px; font-weight: bold; margin: 10px 0; }
  .subtitle { color: #666; font-size: 16px; margin: 10px 0; }
  .section { margin: 20px 0; padding: 15px; background: #f8f9fa; border-radius: 6px; }
  .section-title {
    color: #2c3e50;
    font-size: 18px;
    margin-bottom: 15px;
    border-bottom: 2px solid #e9ecef;
    padding-bottom: 5px;
  }
  .contact-list { list-style: none; padding: 0; margin: 0; }
  .contact-item { padding: 10px; margin: 5px 0; border-left: 4px solid #007bff; background: white; }
  .contact-info { margin-top: 5px; font-size: 14px; color: #666; }
  .button {
    display: inline-block;
    padding: 4px 10px;
    margin: 4px 4px 0 0;
    background-color: #007bff;
    color: white;
    text-decoration: none;
    border-radius: 4px;
    font-size: 13px;
  }
  .stats { width: 100%; border-collapse: collapse; }
  .stats td { padding: 6px 8px; border-bottom: 1px solid #e9ecef; font-size: 14px; }
  .stat-number { font-weight: bold; color: #007bff; text-align: right; }
  .footer {
    margin-top: 30px;
    padding-top: 20px;
    border-top: 1px solid #eaeaea;
    text-align: center;
    font-size: 12px;
    color: #666;
  }
  .footer a { color: #007bff; text-decoration: none; }
"""


def _contact_details(contact: Contact) -> List[str]:
    details = []
    if contact.email:
        details.append(f"Email: {escape(contact.email)}")
    if contact.phone_number:
        details.append(f"Phone: {escape(contact.phone_number)}")
    if contact.city:
        details.append(f"City: {escape(contact.city)}")
    return details


def _section(title: str, body: str) -> str:
    return (
        '<div class="section">'
        f'<h2 class="section-title">{escape(title)}</h2>'
        f"{body}"
        "</div>"
    )


class EmailTemplates:
    """Static HTML fragments composed into report emails."""

    @staticmethod
    def header(title: str, subtitle: str = "") -> str:
        subtitle_html = f'<p class="subtitle">{escape(subtitle)}</p>' if subtitle else ""
        return f'<div class="header"><h1 class="title">{escape(title)}</h1>{subtitle_html}</div>'

    @staticmethod
    def footer(sender_name: str = "Contacts Report") -> str:
        links = " &bull; ".join(
            f'<a href="{escape(url)}">{escape(text)}</a>' for text, url in FOOTER_LINKS
        )
        return f'<div class="footer"><p>Sent by {escape(sender_name)} &bull; {links}</p></div>'

    @staticmethod
    def contact_item(contact: Contact, extra: Optional[List[str]] = None) -> str:
        details = (extra or []) + _contact_details(contact)
        buttons = ""
        if contact.whatsapp_link():
            buttons += f'<a class="button" href="{escape(contact.whatsapp_link())}">WhatsApp</a>'
        for name, link in zip(contact.instagram_names, contact.all_instagram_links()):
            buttons += f'<a class="button" href="{escape(link)}">{escape(name)}</a>'
        return (
            '<li class="contact-item">'
            f"<strong>{escape(contact.name)}</strong>"
            f'<div class="contact-info">{" &bull; ".join(details)}</div>'
            f"{buttons}"
            "</li>"
        )

    @classmethod
    def contact_list(cls, contacts: List[Contact], title: str = "Contacts") -> str:
        if not contacts:
            return "<p>No contacts found.</p>"
        items = "".join(cls.contact_item(contact) for contact in contacts)
        return _section(f"{title} ({len(contacts)})", f'<ul class="contact-list">{items}</ul>')

    @classmethod
    def birthday_list(
        cls,
        upcoming: List[Tuple[Contact, date]],
        today: Optional[date] = None,
    ) -> str:
        if not upcoming:
            return "<p>No upcoming birthdays.</p>"
        items = []
        for contact, next_date in upcoming:
            extra = [f"Birthday: {escape(next_date.strftime('%d.%m.'))}"]
            if contact.has_known_birth_year(today):
                turning = next_date.year - contact.birthday.year
                extra.append(f"Turns {turning}")
            items.append(cls.contact_item(contact, extra))
        return _section(f"Upcoming Birthdays ({len(upcoming)})", f'<ul class="contact-list">{"".join(items)}</ul>')

    @classmethod
    def duplicate_groups(cls, groups: List[List[Contact]]) -> str:
        if not groups:
            return "<p>No duplicate contacts found.</p>"
        return "".join(
            cls.contact_list(group, f"Possible duplicates of {group[0].name}") for group in groups
        )

    @staticmethod
    def _stats_rows(rows: List[Tuple[str, str]]) -> str:
        body = "".join(
            f'<tr><td>{escape(label)}</td><td class="stat-number">{escape(value)}</td></tr>'
            for label, value in rows
        )
        return f'<table class="stats">{body}</table>'

    @classmethod
    def stats_report(cls, stats: ContactStats) -> str:
        coverage = [
            ("Total contacts", str(stats["total_contacts"])),
            ("With birthday", f'{stats["with_birthday"]} ({stats["birthday_percentage"]}%)'),
            ("With email", f'{stats["with_email"]} ({stats["email_percentage"]}%)'),
            ("With phone", f'{stats["with_phone"]} ({stats["phone_percentage"]}%)'),
            ("With city", f'{stats["with_city"]} ({stats["city_percentage"]}%)'),
            ("With labels", f'{stats["with_labels"]} ({stats["label_percentage"]}%)'),
            ("With Instagram", f'{stats["with_instagram"]} ({stats["instagram_percentage"]}%)'),
        ]
        html = _section("Field Coverage", cls._stats_rows(coverage))
        if stats["label_distribution"]:
            distribution = sorted(stats["label_distribution"].items(), key=lambda item: (-item[1], item[0]))
            html += _section(
                "Label Distribution",
                cls._stats_rows([(label, str(count)) for label, count in distribution]),
            )
        return html

    @classmethod
    def label_stats(cls, distribution: Dict[str, int], labels: List[Label]) -> str:
        rows = [(label.name, str(distribution.get(label.name, 0))) for label in labels]
        rows.sort(key=lambda row: (-int(row[1]), row[0]))
        unused = [label.name for label in labels if not distribution.get(label.name)]
        html = _section(f"Labels ({len(labels)})", cls._stats_rows(rows))
        if unused:
            html += _section("Unused Labels", f"<p>{escape(', '.join(unused))}</p>")
        return html

    @classmethod
    def city_groups(cls, cities: Dict[str, List[Contact]]) -> str:
        if not cities:
            return "<p>No contacts with a city.</p>"
        return "".join(cls.contact_list(contacts, city) for city, contacts in cities.items())

    @staticmethod
    def wrap_email(content: str) -> str:
        return (
            "<!DOCTYPE html>"
            "<html><head>"
            '<meta charset="UTF-8">'
            '<meta name="viewport" content="width=device-width, initial-scale=1.0">'
            f"<style>{STYLES}</style>"
            "</head><body>"
            f'<div class="email-container">{content}</div>'
            "</body></html>"
        )
