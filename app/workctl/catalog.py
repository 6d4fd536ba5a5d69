"""Built-in catalog of SME workstation groups.

Used whenever ~/.config/workctl/manifest.toml does not exist. Run
``workctl config init --manifest`` to write it out for editing.
"""

from functools import cache

from workctl.models.manifest import Artifact, Group, InstallItem, Manifest
from workctl.models.package import Backend


def _apt(
    identifier: str,
    display_name: str,
    *,
    critical: bool = True,
    removable: bool = True,
) -> InstallItem:
    return InstallItem(
        backend=Backend.PRIMARY,
        identifier=identifier,
        display_name=display_name,
        critical=critical,
        removable=removable,
    )


def _snap(identifier: str, display_name: str, *install_args: str) -> InstallItem:
    return InstallItem(
        backend=Backend.SECONDARY,
        identifier=identifier,
        display_name=display_name,
        install_args=install_args,
    )


def _web_shortcut(filename: str, name: str, url: str, comment: str) -> Artifact:
    return Artifact(
        path=f"~/.local/share/applications/{filename}",
        display_name=f"{name} Web Shortcut",
        kind="shortcut",
        content=(
            "[Desktop Entry]\n"
            "Type=Application\n"
            f"Name={name} (Web)\n"
            f"Exec=xdg-open {url}\n"
            "Icon=web-browser\n"
            "Terminal=false\n"
            "Categories=Network;VideoConference;\n"
            f"Comment={comment}\n"
        ),
    )


def _desktop_shortcut(
    filename: str,
    display_name: str,
    name: str,
    comment: str,
    exec_line: str,
    icon: str,
    category: str,
    *,
    critical: bool = True,
) -> Artifact:
    return Artifact(
        path=f"~/Desktop/{filename}",
        display_name=display_name,
        kind="shortcut",
        critical=critical,
        content=(
            "[Desktop Entry]\n"
            "Version=1.0\n"
            "Type=Application\n"
            f"Name={name}\n"
            f"Comment={comment}\n"
            f"Exec={exec_line}\n"
            f"Icon={icon}\n"
            "Terminal=false\n"
            f"Categories={category};\n"
        ),
    )


def _workspace_dir(path: str, display_name: str) -> Artifact:
    return Artifact(path=path, display_name=display_name, kind="directory", user_data=True)


def _template(filename: str, display_name: str, content: str, *, critical: bool = True) -> Artifact:
    return Artifact(
        path=f"~/Templates/{filename}",
        display_name=display_name,
        content=content,
        critical=critical,
        user_data=True,
    )


PROJECT_PLAN = """\
# Project Plan
- Project: [Name]
- Client: [Name]
- Timeline: [Start] - [End]
## Deliverables
- [ ] Deliverable 1
- [ ] Deliverable 2
## Budget
- Total: [Amount]
- Expenses: [List]
"""

MEETING_NOTES = """\
# Meeting Notes
Date: [Date]
Attendees: [Names]
## Agenda
- Item 1
- Item 2
## Notes
- ...
## Action Items
- [ ] Task 1 (Owner: [Name])
- [ ] Task 2 (Owner: [Name])
"""

BUSINESS_INVOICE = """\
"Invoice Number","Date","Client","Description","Quantity","Unit Price","Total","VAT","Grand Total"
"INV-001","{date}","Client Name","Service Description","1","100.00","100.00","20.00","120.00"
"""

QUICK_REFERENCE = """\
# Quick Reference
## Communication
- Email: Thunderbird
- Team Chat: Element
- Video Calls: Jitsi Meet / Google Meet
## Productivity
- Office Suite: LibreOffice
- Finance: GnuCash / KMyMoney
- Time Tracking: gtimelog
## File Management
- Cloud Sync: Nextcloud (optional)
- Local Sync: Syncthing
- Encryption: VeraCrypt
"""

# Archived once before a complete removal, and before the workspace group goes
FULL_BACKUP_PATHS: tuple[str, ...] = (
    "~/.config",
    "~/Workspace",
    "~/Templates",
    "~/.thunderbird",
)


def _groups() -> tuple[Group, ...]:
    return (
        Group(
            name="productivity",
            title="Productivity Suite",
            backup_paths=("~/.config/libreoffice", "~/.thunderbird"),
            items=(
                _apt("thunderbird", "Thunderbird Email"),
                _apt("libreoffice", "LibreOffice Office Suite"),
                _apt(
                    "libreoffice-l10n-en-gb",
                    "LibreOffice English Language Pack",
                    critical=False,
                ),
                _apt("hunspell-en-gb", "English Spell Checker", critical=False),
                _apt("gnucash", "GnuCash Accounting"),
                _apt("gimp", "GIMP Image Editor"),
                _apt("inkscape", "Inkscape Vector Graphics"),
                _apt("keepassxc", "KeePassXC Password Manager"),
                _apt("veracrypt", "VeraCrypt Encryption"),
                _apt("deja-dup", "Deja Dup Backup"),
                _apt("git", "Git", removable=False),
                _apt("vim", "Vim", critical=False, removable=False),
                _apt("nautilus", "Nautilus File Manager", removable=False),
                _apt("filezilla", "FileZilla FTP Client"),
            ),
        ),
        Group(
            name="communication",
            title="Communication Suite",
            items=(_snap("element-desktop", "Element Desktop"),),
            artifacts=(
                _web_shortcut(
                    "jitsi-meet-web.desktop",
                    "Jitsi Meet",
                    "https://meet.jit.si",
                    "Video conferencing with Jitsi Meet",
                ),
                _web_shortcut(
                    "google-meet-web.desktop",
                    "Google Meet",
                    "https://meet.google.com",
                    "Video conferencing with Google Meet",
                ),
            ),
        ),
        Group(
            name="finance",
            title="Finance Suite",
            backup_paths=("~/.local/share/gnucash", "~/.local/share/kmymoney"),
            items=(_apt("kmymoney", "KMyMoney Personal Finance"),),
        ),
        Group(
            name="creative",
            title="Creative Suite",
            backup_paths=("~/.config/gimp", "~/.config/inkscape", "~/.config/kdenlive"),
            items=(
                _apt("scribus", "Scribus Desktop Publishing"),
                _apt("kdenlive", "Kdenlive Video Editor"),
                _apt("audacity", "Audacity Audio Editor"),
                _apt("pdfarranger", "PDF Arranger"),
                _apt("darktable", "Darktable Photo Editor", critical=False),
                _apt("rawtherapee", "RawTherapee RAW Photo Editor", critical=False),
            ),
        ),
        Group(
            name="security",
            title="Security Suite",
            items=(
                _apt("syncthing", "Syncthing File Synchronization"),
                _apt("torbrowser-launcher", "Tor Browser Launcher"),
                _apt("seahorse", "Seahorse Password Manager", critical=False),
                _apt("gnome-keyring", "GNOME Keyring", critical=False),
            ),
        ),
        Group(
            name="utilities",
            title="Utilities Suite",
            items=(
                _apt("baobab", "Disk Usage Analyzer"),
                _apt("htop", "HTop System Monitor"),
                _apt("glances", "Glances System Monitor"),
                _apt("simple-scan", "Simple Scan"),
                _apt("ocrfeeder", "OCR Feeder"),
                _apt("gparted", "GParted Partition Editor", critical=False),
                _apt("timeshift", "Timeshift System Backup", critical=False),
                _apt("stacer", "Stacer System Optimizer", critical=False),
            ),
        ),
        Group(
            name="time-tracking",
            title="Time Tracking Suite",
            items=(
                _apt("gtimelog", "GTimeLog Time Tracker"),
                _apt("ktimetracker", "KTimeTracker", critical=False),
                _apt("hamster-time-tracker", "Hamster Time Tracker", critical=False),
            ),
        ),
        Group(
            name="dev-tools",
            title="Development Tools",
            items=(
                _apt("python3", "Python 3", removable=False),
                _apt("python3-pip", "Python Package Manager", critical=False),
                _apt(
                    "python3-venv",
                    "Python Virtual Environments",
                    critical=False,
                    removable=False,
                ),
                _apt("nodejs", "Node.js JavaScript Runtime", critical=False),
                _apt("npm", "Node Package Manager", critical=False),
                _apt("build-essential", "Build Essential Tools", critical=False),
                _apt("gitk", "Git History Viewer", critical=False),
                _apt("meld", "Meld Diff Tool"),
                _snap("code", "VS Code", "--classic"),
            ),
        ),
        Group(
            name="workspace",
            title="Workspace & Shortcuts",
            backup_paths=FULL_BACKUP_PATHS,
            artifacts=(
                _workspace_dir("~/Workspace", "Main Workspace"),
                _workspace_dir("~/Workspace/Projects", "Projects Directory"),
                _workspace_dir("~/Workspace/Documents", "Documents Directory"),
                _workspace_dir("~/Workspace/ClientWork", "ClientWork Directory"),
                _workspace_dir("~/Workspace/Administrative", "Administrative Directory"),
                _workspace_dir("~/Workspace/Archive", "Archive Directory"),
                _workspace_dir("~/Templates", "Templates Directory"),
                _template("Project_Plan.md", "Project Plan Template", PROJECT_PLAN),
                _template("Meeting_Notes.md", "Meeting Notes Template", MEETING_NOTES),
                _template("Business_Invoice.csv", "Business Invoice Template", BUSINESS_INVOICE),
                _template(
                    "Quick_Reference.md",
                    "Quick Reference Template",
                    QUICK_REFERENCE,
                    critical=False,
                ),
                _desktop_shortcut(
                    "Workspace.desktop",
                    "Workspace Shortcut",
                    "📁 Open Workspace",
                    "Open your business workspace",
                    "xdg-open {home}/Workspace",
                    "folder",
                    "Utility",
                ),
                _desktop_shortcut(
                    "Productivity-Center.desktop",
                    "Productivity Center Shortcut",
                    "🚀 Productivity Center",
                    "Launch Office, Email, and Business Apps",
                    "libreoffice",
                    "libreoffice-main",
                    "Office",
                ),
                _desktop_shortcut(
                    "Time-Tracking.desktop",
                    "Time Tracking Shortcut",
                    "⏱️ Time Tracking",
                    "Launch time tracking application",
                    "gtimelog",
                    "gtimelog",
                    "Office",
                    critical=False,
                ),
            ),
        ),
    )


# Essential applications checked by ``workctl verify --quick``
QUICK_CHECKS: tuple[InstallItem, ...] = (
    _apt("thunderbird", "Thunderbird"),
    _apt("libreoffice", "LibreOffice"),
    _apt("gnucash", "GnuCash"),
    _snap("code", "VS Code"),
    _snap("element-desktop", "Element Desktop"),
)


@cache
def default_manifest() -> Manifest:
    """Return the built-in manifest."""
    return Manifest(
        groups=_groups(),
        quick_checks=QUICK_CHECKS,
        full_backup_paths=FULL_BACKUP_PATHS,
    )
