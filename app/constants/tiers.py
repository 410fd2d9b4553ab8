"""
Referral tier table (role layer).

Mapping: downstream referral count → tier role name.
Tiers: 1–4 → Starter, 5–9 → Recruiter, 10–29 → Leader, 30–49 → Captain,
50–74 → Commander, 75–99 → Champion, 100+ → Legend. Zero referrals → no tier role.

Colors are RGB integers applied when the role is first created in a community.
"""

# (minimum_count, role_name, color)
REFERRAL_TIERS = (
    (1, "Starter", 0x3498DB),
    (5, "Recruiter", 0x1ABC9C),
    (10, "Leader", 0x2ECC71),
    (30, "Captain", 0xF1C40F),
    (50, "Commander", 0xE67E22),
    (75, "Champion", 0xE74C3C),
    (100, "Legend", 0x9B59B6),
)
