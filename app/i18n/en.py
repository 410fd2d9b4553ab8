# -*- coding: utf-8 -*-
"""English (en) strings."""

LANG = {
    # Announcements (announcement channel)
    "announce.member_joined": "🎉 <@{member_id}> joined using <@{inviter_id}>'s invite! Total for <@{inviter_id}>: **{total}**",
    "announce.member_left": "👋 <@{member_id}> left. <@{inviter_id}> now has **{total}** invites.",

    # Command replies
    "invites.self": "📨 You have **{total}** total invites ({direct} direct).",
    "invites.other": "📨 <@{member_id}> has **{total}** total invites ({direct} direct).",
    "leaderboard.title": "🏆 **Invite Leaderboard**",
    "leaderboard.entry": "{rank}. <@{member_id}> — **{total}** total ({direct} direct)",
    "leaderboard.empty": "No invites have been tracked yet.",
}
