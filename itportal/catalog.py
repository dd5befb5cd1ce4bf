# itportal/catalog.py
# Policy and tool catalogs an employee works through during onboarding.
from flask import current_app

POLICY_MODULES = [
    {"id": "mod1", "title": "Module 1: Getting Set Up", "policies": [
        ("m1p1", "Domain Account & Email"),
        ("m1p2", "Machine Basics & Handling"),
        ("m1p3", "Multi-Factor Authentication (MFA)"),
    ]},
    {"id": "mod2", "title": "Module 2: Staying Secure", "policies": [
        ("m2p1", "Cybersecurity Awareness"),
        ("m2p2", "Unsecure & Illegal Site Policy"),
        ("m2p3", "External Devices & USB Rules"),
        ("m2p4", "Data Classification & Handling"),
    ]},
    {"id": "mod3", "title": "Module 3: Tools & Support", "policies": [
        ("m3p1", "Zammad Ticketing Platform"),
        ("m3p2", "Unauthorized Installation Policy"),
        ("m3p3", "Wi-Fi Access"),
        ("m3p4", "Shadow IT & SaaS Policy"),
    ]},
    {"id": "mod4", "title": "Module 4: Maintenance & Backup", "policies": [
        ("m4p1", "System Updates & Patch Management"),
        ("m4p2", "Data Backups & Recovery"),
        ("m4p3", "Change Requests & Incidents"),
    ]},
    {"id": "mod5", "title": "Module 5: Extras & FAQs", "policies": [
        ("m5p1", "After-Hours Support"),
        ("m5p2", "Common Troubleshooting"),
        ("m5p3", "Continuous Learning & Feedback"),
    ]},
]

BASE_TOOLS = [
    ("t0_account", "Domain Account & Password (Received/Set)"),
    ("t1", "Email Client (Titan/Gmail) Setup"),
    ("t_zammad", "Zammad (IT Support Platform) Login Confirmed"),
]
ADMIN_TOOLS = [
    ("t_admin_iam", "Admin: IAM Console Access Verified"),
]


class Catalog:
    """Ordered policy ids plus the base and admin-only tool ids."""

    def __init__(self, policy_ids, tool_ids, admin_tool_ids=(), modules=None, titles=None):
        self.policy_ids = list(policy_ids)
        self.base_tool_ids = list(tool_ids)
        self.admin_tool_ids = list(admin_tool_ids)
        self.modules = modules if modules is not None else [
            {"id": "all", "title": "Policies", "policyIds": list(self.policy_ids)}
        ]
        self.titles = titles or {}

    def tool_ids(self, role):
        if _is_admin_role(role):
            return self.base_tool_ids + [t for t in self.admin_tool_ids if t not in self.base_tool_ids]
        return list(self.base_tool_ids)

    def to_dict(self, role):
        return {
            "modules": [
                {
                    "id": m["id"],
                    "title": m["title"],
                    "policies": [{"id": pid, "title": self.titles.get(pid, pid)} for pid in m["policyIds"]],
                }
                for m in self.modules
            ],
            "tools": [{"id": tid, "name": self.titles.get(tid, tid)} for tid in self.tool_ids(role)],
        }


def _is_admin_role(role):
    value = getattr(role, "value", role)
    return isinstance(value, str) and value.strip().upper() == "ADMIN"


def default_catalog():
    titles = dict(BASE_TOOLS + ADMIN_TOOLS)
    modules = []
    for module in POLICY_MODULES:
        titles.update(module["policies"])
        modules.append({
            "id": module["id"],
            "title": module["title"],
            "policyIds": [pid for pid, _ in module["policies"]],
        })
    return Catalog(
        policy_ids=[pid for m in modules for pid in m["policyIds"]],
        tool_ids=[tid for tid, _ in BASE_TOOLS],
        admin_tool_ids=[tid for tid, _ in ADMIN_TOOLS],
        modules=modules,
        titles=titles,
    )


def get_catalog():
    """Catalog for the running app; config overrides replace the built-in ids."""
    cfg = current_app.config
    if cfg.get("POLICY_IDS") is None and cfg.get("TOOL_IDS") is None and cfg.get("ADMIN_TOOL_IDS") is None:
        return default_catalog()
    builtin = default_catalog()
    policy_ids = cfg.get("POLICY_IDS")
    return Catalog(
        policy_ids=builtin.policy_ids if policy_ids is None else policy_ids,
        tool_ids=builtin.base_tool_ids if cfg.get("TOOL_IDS") is None else cfg["TOOL_IDS"],
        admin_tool_ids=builtin.admin_tool_ids if cfg.get("ADMIN_TOOL_IDS") is None else cfg["ADMIN_TOOL_IDS"],
        modules=builtin.modules if policy_ids is None else None,
        titles=builtin.titles,
    )
