"""
sifter/evidence/templates.py: Narrative template registry.

One template per (metric key, band) cell: 13 metrics × 3 bands = 39 cells.
Templates are plain functions registered with @template(key, band); each
takes the metric score and a Facts view and returns a Narrative. Adding a
metric means adding three functions; nothing else changes.

Bands:
    'high'   score >= 60
    'medium' 30 <= score < 60
    'low'    score < 30

Fact keys read by the templates (all optional):
    team_members, verified_members, prior_projects, linkedin_profiles,
    failed_projects, years_experience, entities, rugged_projects,
    mod_overlap_count, shared_moderators, top_keywords, mercenary_ratio,
    sampled_messages, peak_window, posting_entropy, timezone_spread,
    new_account_ratio, creation_spike, median_account_age_days,
    twitter_handle, on_topic_ratio, off_topic_topics, tweets_analyzed,
    repo_url, commit_count, contributors, forked_from, similarity_ratio,
    top_contributor, top_contributor_share, follower_growth,
    paid_promotions, influencers, founder_name, side_projects,
    founder_tweet_share, engagement_rate, bot_reply_ratio, reply_samples,
    contract_address, chain, team_allocation, vesting_months,
    top_holder_share, liquidity_locked, discord_invite, website.
"""

from typing import Callable

from sifter.evidence.block import Facts, Narrative

TemplateFn = Callable[[float, Facts], Narrative]

TEMPLATES: dict = {}

BANDS = ("high", "medium", "low")


def template(metric_key: str, band: str):
    """Register fn as the narrative for (metric_key, band)."""
    if band not in BANDS:
        raise ValueError(f"Unknown evidence band: {band!r}")

    def register(fn: TemplateFn) -> TemplateFn:
        TEMPLATES[(metric_key, band)] = fn
        return fn

    return register


def _pts(score: float) -> str:
    score = float(score)
    return f"{int(score)}/100" if score.is_integer() else f"{score:.1f}/100"


def _repo(f: Facts) -> str:
    return f.text("repo_url", "the project's public repository")


def _twitter(f: Facts) -> str:
    handle = f.text("twitter_handle", "")
    if not handle:
        return "the project's X/Twitter account"
    return handle if handle.startswith("@") else f"@{handle}"


# ── Team Identity ─────────────────────────────────────────────────────────────

@template("teamIdentity", "high")
def team_identity_high(score: float, f: Facts) -> Narrative:
    members = f.names("team_members", "No named team members")
    verified = f.count("verified_members", "0")
    return Narrative(
        headline=f"Team Identity {_pts(score)}: team cannot be verified",
        findings=[
            f"Listed team: {members}",
            f"Members with independently verifiable identities: {verified}",
            "No consistent professional history found across LinkedIn, GitHub and prior employers",
            "Profile photos and bios show signs of reuse or generation",
        ],
        red_flags=[
            "**Anonymous or pseudonymous leadership** controls treasury and contracts",
            "Team page was edited or removed during the observation window",
            "Claimed credentials could not be matched to any institution",
        ],
        sources=[
            f.text("website", "Project website team page"),
            "LinkedIn profile search",
            "Reverse image search on team avatars",
        ],
    )


@template("teamIdentity", "medium")
def team_identity_medium(score: float, f: Facts) -> Narrative:
    members = f.names("team_members", "Partially disclosed team")
    verified = f.count("verified_members", "some")
    return Narrative(
        headline=f"Team Identity {_pts(score)}: partially verified team",
        findings=[
            f"Listed team: {members}",
            f"Verified identities: {verified}; remaining members are pseudonymous",
            "Core developer identities are public, business roles are not",
        ],
        red_flags=[
            "*Key signers* on the treasury multisig are not publicly identified",
        ],
        sources=[
            f.text("website", "Project website team page"),
            "LinkedIn profile search",
        ],
    )


@template("teamIdentity", "low")
def team_identity_low(score: float, f: Facts) -> Narrative:
    members = f.names("team_members", "The core team")
    return Narrative(
        headline=f"Team Identity {_pts(score)}: publicly doxxed team",
        findings=[
            f"{members} publicly identified with consistent histories",
            "Professional profiles are long-lived and cross-reference each other",
            "Team has appeared in recorded talks and interviews under real names",
        ],
        red_flags=[],
        sources=[
            f.text("website", "Project website team page"),
            "LinkedIn profiles",
            "Conference speaker listings",
        ],
    )


# ── Team Competence ───────────────────────────────────────────────────────────

@template("teamCompetence", "high")
def team_competence_high(score: float, f: Facts) -> Narrative:
    members = f.names("team_members", "the team")
    failed = f.names("failed_projects", "no verifiable shipped products")
    return Narrative(
        headline=f"Team Competence {_pts(score)}: no credible delivery record",
        findings=[
            f"Track record for {members}: {failed}",
            "No smart-contract, protocol or security experience evident",
            "Technical claims in the whitepaper exceed anything the team has shipped",
        ],
        red_flags=[
            "**Prior projects abandoned** shortly after token launch",
            "Roadmap milestones repeatedly slipped without explanation",
        ],
        sources=[
            "Whitepaper and roadmap",
            f.text("linkedin_profiles", "LinkedIn work history"),
            _repo(f),
        ],
    )


@template("teamCompetence", "medium")
def team_competence_medium(score: float, f: Facts) -> Narrative:
    years = f.count("years_experience", "limited")
    prior = f.names("prior_projects", "unrelated Web2 products")
    return Narrative(
        headline=f"Team Competence {_pts(score)}: relevant but thin experience",
        findings=[
            f"Combined relevant experience: {years} years",
            f"Prior work: {prior}",
            "Engineering capacity looks adequate for the current scope, not for the roadmap",
        ],
        red_flags=[
            "No audited protocol previously shipped by this team",
        ],
        sources=[
            f.text("linkedin_profiles", "LinkedIn work history"),
            _repo(f),
        ],
    )


@template("teamCompetence", "low")
def team_competence_low(score: float, f: Facts) -> Narrative:
    prior = f.names("prior_projects", "previously shipped, audited products")
    years = f.count("years_experience", "several")
    return Narrative(
        headline=f"Team Competence {_pts(score)}: proven builders",
        findings=[
            f"Track record includes {prior}",
            f"Relevant experience: {years} years across protocol engineering and security",
            "Delivery history matches stated roadmap cadence",
        ],
        red_flags=[],
        sources=[
            f.text("linkedin_profiles", "LinkedIn work history"),
            _repo(f),
            "Public audit reports",
        ],
    )


# ── Contaminated Network ──────────────────────────────────────────────────────

@template("contaminatedNetwork", "high")
def contaminated_network_high(score: float, f: Facts) -> Narrative:
    entities = f.names("entities", "known rug-associated agencies")
    rugged = f.names("rugged_projects", "previously rugged projects")
    overlap = f.count("mod_overlap_count", "multiple")
    return Narrative(
        headline=f"Contaminated Network {_pts(score)}: ties to known bad actors",
        findings=[
            f"Associated entities: {entities}",
            f"Shared infrastructure or staff with: {rugged}",
            f"Moderators shared with flagged communities: {overlap}",
            "Promotion wallets funded from addresses linked to past exit scams",
        ],
        red_flags=[
            f"**Agency involvement**: {entities} appear in prior rug pulls",
            "Community moderators rotated in from abandoned projects",
            "Launch playbook matches a documented pump-and-dump pattern",
        ],
        sources=[
            "Sifter flagged-entity database",
            f.text("discord_invite", "Discord moderator roster"),
            "On-chain funding trace",
        ],
    )


@template("contaminatedNetwork", "medium")
def contaminated_network_medium(score: float, f: Facts) -> Narrative:
    entities = f.names("entities", "marketing partners with mixed histories")
    overlap = f.count("mod_overlap_count", "a small number of")
    return Narrative(
        headline=f"Contaminated Network {_pts(score)}: indirect links to flagged entities",
        findings=[
            f"Associated entities: {entities}",
            f"Moderator overlap with flagged communities: {overlap}",
            "No direct wallet links to known scam operators",
        ],
        red_flags=[
            "Marketing partner has *mixed outcomes* across previous launches",
        ],
        sources=[
            "Sifter flagged-entity database",
            f.text("discord_invite", "Discord moderator roster"),
        ],
    )


@template("contaminatedNetwork", "low")
def contaminated_network_low(score: float, f: Facts) -> Narrative:
    return Narrative(
        headline=f"Contaminated Network {_pts(score)}: clean network",
        findings=[
            "No associations with flagged agencies, influencers or advisors",
            "Moderator and admin accounts are unique to this community",
            "Funding wallets trace to identifiable, unflagged sources",
        ],
        red_flags=[],
        sources=[
            "Sifter flagged-entity database",
            "On-chain funding trace",
        ],
    )


# ── Mercenary Keywords ────────────────────────────────────────────────────────

@template("mercenaryKeywords", "high")
def mercenary_keywords_high(score: float, f: Facts) -> Narrative:
    keywords = f.names("top_keywords", "'100x', 'moon', 'wen listing', 'airdrop'")
    ratio = f.percent("mercenary_ratio", "a majority")
    sampled = f.count("sampled_messages", "all sampled")
    return Narrative(
        headline=f"Mercenary Keywords {_pts(score)}: price talk dominates the community",
        findings=[
            f"Share of messages about price, listings or rewards: {ratio}",
            f"Most frequent terms: {keywords}",
            f"Messages analysed: {sampled}",
            "Product and technology discussion is nearly absent",
        ],
        red_flags=[
            "**Community is financially motivated**, not product motivated",
            "Copy-paste shill messages repeated across channels",
        ],
        sources=[
            f.text("discord_invite", "Discord general channels"),
            "Telegram group export",
            _twitter(f),
        ],
    )


@template("mercenaryKeywords", "medium")
def mercenary_keywords_medium(score: float, f: Facts) -> Narrative:
    ratio = f.percent("mercenary_ratio", "a noticeable share")
    keywords = f.names("top_keywords", "price and airdrop terms")
    return Narrative(
        headline=f"Mercenary Keywords {_pts(score)}: mixed financial and product discourse",
        findings=[
            f"Price and reward talk: {ratio} of sampled messages",
            f"Recurring terms: {keywords}",
            "Genuine product questions are present but outnumbered during campaigns",
        ],
        red_flags=[
            "Spikes in reward talk line up with *incentive campaigns*",
        ],
        sources=[
            f.text("discord_invite", "Discord general channels"),
            _twitter(f),
        ],
    )


@template("mercenaryKeywords", "low")
def mercenary_keywords_low(score: float, f: Facts) -> Narrative:
    ratio = f.percent("mercenary_ratio", "a small share")
    return Narrative(
        headline=f"Mercenary Keywords {_pts(score)}: product-focused community",
        findings=[
            f"Price and reward talk limited to {ratio} of messages",
            "Most threads discuss features, integrations and support",
        ],
        red_flags=[],
        sources=[
            f.text("discord_invite", "Discord general channels"),
            _twitter(f),
        ],
    )


# ── Message Time Entropy ──────────────────────────────────────────────────────

@template("messageTimeEntropy", "high")
def message_time_entropy_high(score: float, f: Facts) -> Narrative:
    window = f.text("peak_window", "a narrow daily window")
    entropy = f.text("posting_entropy", "very low")
    return Narrative(
        headline=f"Message Time Entropy {_pts(score)}: coordinated posting schedule",
        findings=[
            f"Posting activity concentrated in {window}",
            f"Timing entropy: {entropy} (organic communities spread across time zones)",
            "Bursts of near-identical messages within seconds of each other",
        ],
        red_flags=[
            "**Scheduled posting** consistent with a bot farm or paid shift work",
            "Activity stops abruptly outside campaign hours",
        ],
        sources=[
            "Message timestamp histogram",
            f.text("discord_invite", "Discord message export"),
        ],
    )


@template("messageTimeEntropy", "medium")
def message_time_entropy_medium(score: float, f: Facts) -> Narrative:
    window = f.text("peak_window", "campaign hours")
    spread = f.count("timezone_spread", "a few")
    return Narrative(
        headline=f"Message Time Entropy {_pts(score)}: partially clustered activity",
        findings=[
            f"Noticeable clustering around {window}",
            f"Active time zones observed: {spread}",
        ],
        red_flags=[
            "Periodic bursts suggest *some* scheduled amplification",
        ],
        sources=[
            "Message timestamp histogram",
        ],
    )


@template("messageTimeEntropy", "low")
def message_time_entropy_low(score: float, f: Facts) -> Narrative:
    spread = f.count("timezone_spread", "many")
    return Narrative(
        headline=f"Message Time Entropy {_pts(score)}: natural posting rhythm",
        findings=[
            f"Activity spread across {spread} time zones",
            "Daily rhythm follows organic waking-hours patterns",
        ],
        red_flags=[],
        sources=[
            "Message timestamp histogram",
        ],
    )


# ── Account Age Entropy ───────────────────────────────────────────────────────

@template("accountAgeEntropy", "high")
def account_age_entropy_high(score: float, f: Facts) -> Narrative:
    ratio = f.percent("new_account_ratio", "a large share")
    spike = f.text("creation_spike", "the weeks before launch")
    median_age = f.count("median_account_age_days", "under 30")
    return Narrative(
        headline=f"Account Age Entropy {_pts(score)}: bulk-created follower base",
        findings=[
            f"Accounts younger than 30 days: {ratio}",
            f"Creation spike around {spike}",
            f"Median follower account age: {median_age} days",
        ],
        red_flags=[
            "**Bulk account creation** in tight batches",
            "Default avatars and sequential usernames",
        ],
        sources=[
            _twitter(f),
            f.text("discord_invite", "Discord member list"),
        ],
    )


@template("accountAgeEntropy", "medium")
def account_age_entropy_medium(score: float, f: Facts) -> Narrative:
    ratio = f.percent("new_account_ratio", "an elevated share")
    return Narrative(
        headline=f"Account Age Entropy {_pts(score)}: some recent account clustering",
        findings=[
            f"Recently created accounts: {ratio} of the sampled audience",
            "Older accounts still make up the active core",
        ],
        red_flags=[
            "Account creation clustered around *giveaway* announcements",
        ],
        sources=[
            _twitter(f),
        ],
    )


@template("accountAgeEntropy", "low")
def account_age_entropy_low(score: float, f: Facts) -> Narrative:
    median_age = f.count("median_account_age_days", "several hundred")
    return Narrative(
        headline=f"Account Age Entropy {_pts(score)}: organic audience growth",
        findings=[
            f"Median follower account age: {median_age} days",
            "Account creation dates are widely distributed",
        ],
        red_flags=[],
        sources=[
            _twitter(f),
        ],
    )


# ── Tweet Focus ───────────────────────────────────────────────────────────────

@template("tweetFocus", "high")
def tweet_focus_high(score: float, f: Facts) -> Narrative:
    on_topic = f.percent("on_topic_ratio", "a small minority")
    topics = f.names("off_topic_topics", "giveaways, price targets and unrelated memes")
    analysed = f.count("tweets_analyzed", "recent")
    return Narrative(
        headline=f"Tweet Focus {_pts(score)}: narrative drifts away from the product",
        findings=[
            f"Tweets about the product itself: {on_topic}",
            f"Dominant topics: {topics}",
            f"Tweets analysed (30d): {analysed}",
        ],
        red_flags=[
            "**Narrative pivots** follow whatever sector is trending",
            "Product updates are vague and never link to shipped work",
        ],
        sources=[
            _twitter(f),
        ],
    )


@template("tweetFocus", "medium")
def tweet_focus_medium(score: float, f: Facts) -> Narrative:
    on_topic = f.percent("on_topic_ratio", "roughly half")
    return Narrative(
        headline=f"Tweet Focus {_pts(score)}: mixed product and promotional content",
        findings=[
            f"Product-related tweets: {on_topic}",
            "Promotional threads and giveaways fill the remainder",
        ],
        red_flags=[
            "Roadmap claims are *repeated* without progress updates",
        ],
        sources=[
            _twitter(f),
        ],
    )


@template("tweetFocus", "low")
def tweet_focus_low(score: float, f: Facts) -> Narrative:
    on_topic = f.percent("on_topic_ratio", "most")
    return Narrative(
        headline=f"Tweet Focus {_pts(score)}: consistent product narrative",
        findings=[
            f"Product-related tweets: {on_topic}",
            "Updates link to releases, docs and audits",
        ],
        red_flags=[],
        sources=[
            _twitter(f),
        ],
    )


# ── GitHub Authenticity ───────────────────────────────────────────────────────

@template("githubAuthenticity", "high")
def github_authenticity_high(score: float, f: Facts) -> Narrative:
    forked = f.text("forked_from", "an existing open-source protocol")
    similarity = f.percent("similarity_ratio", "most")
    commits = f.count("commit_count", "very few")
    return Narrative(
        headline=f"GitHub Authenticity {_pts(score)}: copied or inactive codebase",
        findings=[
            f"Repository: {_repo(f)}",
            f"Code similarity with {forked}: {similarity}",
            f"Original commits: {commits}",
            "Commit history squashed or backdated shortly before launch",
        ],
        red_flags=[
            "**Copy-paste codebase** with names swapped and no attribution",
            "Contracts deployed on-chain do not match the published source",
        ],
        sources=[
            _repo(f),
            "Code similarity scan",
            f"Contract {f.text('contract_address', 'address not disclosed')}",
        ],
    )


@template("githubAuthenticity", "medium")
def github_authenticity_medium(score: float, f: Facts) -> Narrative:
    forked = f.text("forked_from", "a popular template")
    contributors = f.count("contributors", "a handful of")
    return Narrative(
        headline=f"GitHub Authenticity {_pts(score)}: fork with limited original work",
        findings=[
            f"Repository: {_repo(f)}",
            f"Derived from {forked} with moderate modifications",
            f"Active contributors: {contributors}",
        ],
        red_flags=[
            "Original contributions are *mostly cosmetic*",
        ],
        sources=[
            _repo(f),
            "Code similarity scan",
        ],
    )


@template("githubAuthenticity", "low")
def github_authenticity_low(score: float, f: Facts) -> Narrative:
    commits = f.count("commit_count", "a steady stream of")
    contributors = f.count("contributors", "multiple")
    return Narrative(
        headline=f"GitHub Authenticity {_pts(score)}: genuine ongoing development",
        findings=[
            f"Repository: {_repo(f)}",
            f"Commits: {commits} from {contributors} contributors",
            "Issues, reviews and releases show a real engineering workflow",
        ],
        red_flags=[],
        sources=[
            _repo(f),
        ],
    )


# ── Bus Factor ────────────────────────────────────────────────────────────────

@template("busFactor", "high")
def bus_factor_high(score: float, f: Facts) -> Narrative:
    top = f.text("top_contributor", "a single developer")
    share = f.percent("top_contributor_share", "nearly all")
    return Narrative(
        headline=f"Bus Factor {_pts(score)}: single point of failure",
        findings=[
            f"{top} authored {share} of commits",
            "Deploy keys and admin roles held by the same person",
        ],
        red_flags=[
            "**Project stalls** if one contributor leaves",
        ],
        sources=[
            _repo(f),
            "Contract admin role scan",
        ],
    )


@template("busFactor", "medium")
def bus_factor_medium(score: float, f: Facts) -> Narrative:
    top = f.text("top_contributor", "the lead developer")
    share = f.percent("top_contributor_share", "a majority")
    return Narrative(
        headline=f"Bus Factor {_pts(score)}: concentrated maintenance",
        findings=[
            f"{top} authored {share} of recent commits",
            "A second maintainer reviews but rarely ships code",
        ],
        red_flags=[
            "Knowledge of core contracts *concentrated* in one or two people",
        ],
        sources=[
            _repo(f),
        ],
    )


@template("busFactor", "low")
def bus_factor_low(score: float, f: Facts) -> Narrative:
    contributors = f.count("contributors", "several")
    return Narrative(
        headline=f"Bus Factor {_pts(score)}: well-distributed maintenance",
        findings=[
            f"{contributors} contributors share core development",
            "Admin keys held by a multisig with independent signers",
        ],
        red_flags=[],
        sources=[
            _repo(f),
        ],
    )


# ── Artificial Hype ───────────────────────────────────────────────────────────

@template("artificialHype", "high")
def artificial_hype_high(score: float, f: Facts) -> Narrative:
    growth = f.percent("follower_growth", "an implausible rate")
    promos = f.count("paid_promotions", "numerous")
    influencers = f.names("influencers", "paid promotion accounts")
    return Narrative(
        headline=f"Artificial Hype {_pts(score)}: paid growth campaign",
        findings=[
            f"Follower growth in 30 days: {growth}",
            f"Undisclosed paid promotions detected: {promos}",
            f"Promoters: {influencers}",
        ],
        red_flags=[
            "**Growth spikes** without matching product news",
            "Promoters post identical copy within minutes of each other",
        ],
        sources=[
            _twitter(f),
            "Influencer promotion tracker",
        ],
    )


@template("artificialHype", "medium")
def artificial_hype_medium(score: float, f: Facts) -> Narrative:
    promos = f.count("paid_promotions", "some")
    return Narrative(
        headline=f"Artificial Hype {_pts(score)}: amplified but not fabricated",
        findings=[
            f"Paid promotions detected: {promos}",
            "Organic mentions exist alongside campaign bursts",
        ],
        red_flags=[
            "Promotion disclosures are *inconsistent*",
        ],
        sources=[
            _twitter(f),
        ],
    )


@template("artificialHype", "low")
def artificial_hype_low(score: float, f: Facts) -> Narrative:
    growth = f.percent("follower_growth", "a steady rate")
    return Narrative(
        headline=f"Artificial Hype {_pts(score)}: organic attention",
        findings=[
            f"Follower growth of {growth} tracks product milestones",
            "No undisclosed paid promotion detected",
        ],
        red_flags=[],
        sources=[
            _twitter(f),
        ],
    )


# ── Founder Distraction ───────────────────────────────────────────────────────

@template("founderDistraction", "high")
def founder_distraction_high(score: float, f: Facts) -> Narrative:
    founder = f.text("founder_name", "The founder")
    side = f.names("side_projects", "several unrelated ventures")
    share = f.percent("founder_tweet_share", "a small fraction")
    return Narrative(
        headline=f"Founder Distraction {_pts(score)}: founder focus is elsewhere",
        findings=[
            f"{founder} is simultaneously running {side}",
            f"Founder posts about this project: {share}",
            "Personal brand content outweighs product communication",
        ],
        red_flags=[
            "**Serial launches**: new token announced before this one delivered",
        ],
        sources=[
            "Founder social accounts",
            "Company registry search",
        ],
    )


@template("founderDistraction", "medium")
def founder_distraction_medium(score: float, f: Facts) -> Narrative:
    founder = f.text("founder_name", "The founder")
    side = f.names("side_projects", "an advisory role elsewhere")
    return Narrative(
        headline=f"Founder Distraction {_pts(score)}: divided attention",
        findings=[
            f"{founder} also holds {side}",
            "Product communication continues but at a slower cadence",
        ],
        red_flags=[
            "Founder time split *across projects*",
        ],
        sources=[
            "Founder social accounts",
        ],
    )


@template("founderDistraction", "low")
def founder_distraction_low(score: float, f: Facts) -> Narrative:
    founder = f.text("founder_name", "The founder")
    return Narrative(
        headline=f"Founder Distraction {_pts(score)}: focused leadership",
        findings=[
            f"{founder} works full-time on this project",
            "Public communication centres on product progress",
        ],
        red_flags=[],
        sources=[
            "Founder social accounts",
        ],
    )


# ── Engagement Authenticity ───────────────────────────────────────────────────

@template("engagementAuthenticity", "high")
def engagement_authenticity_high(score: float, f: Facts) -> Narrative:
    bot_ratio = f.percent("bot_reply_ratio", "a majority")
    rate = f.percent("engagement_rate", "an abnormal")
    samples = f.items("reply_samples", limit=3)
    findings = [
        f"Replies classified as bot-like: {bot_ratio}",
        f"Engagement rate: {rate} (inconsistent with follower quality)",
    ]
    for sample in samples:
        findings.append(f'Sample reply: "{sample}"')
    return Narrative(
        headline=f"Engagement Authenticity {_pts(score)}: performative engagement",
        findings=findings,
        red_flags=[
            "**Engagement pods** and reply bots inflate every post",
            "Same accounts like and reply within seconds of publication",
        ],
        sources=[
            _twitter(f),
            "Reply similarity analysis",
        ],
    )


@template("engagementAuthenticity", "medium")
def engagement_authenticity_medium(score: float, f: Facts) -> Narrative:
    bot_ratio = f.percent("bot_reply_ratio", "a noticeable share")
    return Narrative(
        headline=f"Engagement Authenticity {_pts(score)}: partly inflated engagement",
        findings=[
            f"Bot-like replies: {bot_ratio}",
            "Genuine discussion present on technical announcements",
        ],
        red_flags=[
            "Giveaway posts attract *low-quality* engagement",
        ],
        sources=[
            _twitter(f),
        ],
    )


@template("engagementAuthenticity", "low")
def engagement_authenticity_low(score: float, f: Facts) -> Narrative:
    rate = f.percent("engagement_rate", "a healthy")
    return Narrative(
        headline=f"Engagement Authenticity {_pts(score)}: genuine engagement",
        findings=[
            f"Engagement rate: {rate}, consistent with audience size",
            "Replies contain substantive questions and feedback",
        ],
        red_flags=[],
        sources=[
            _twitter(f),
        ],
    )


# ── Tokenomics ────────────────────────────────────────────────────────────────

@template("tokenomics", "high")
def tokenomics_high(score: float, f: Facts) -> Narrative:
    contract = f.text("contract_address", "Contract address not disclosed")
    chain = f.text("chain", "unknown chain")
    team = f.percent("team_allocation", "an outsized share")
    vesting = f.count("vesting_months", "no")
    holder = f.percent("top_holder_share", "a dominant share")
    locked = f.flag("liquidity_locked")
    findings = [
        f"Contract: {contract} ({chain})",
        f"Team and insider allocation: {team}",
        f"Vesting period: {vesting} months",
        f"Largest holder controls {holder} of supply",
    ]
    red_flags = [
        "**Insiders can dump** on the market at launch",
        "Mint or blacklist functions remain callable by the deployer",
    ]
    if locked is False:
        red_flags.append("Liquidity is *not locked*")
    return Narrative(
        headline=f"Tokenomics {_pts(score)}: extractive token structure",
        findings=findings,
        red_flags=red_flags,
        sources=[
            f"Block explorer: {contract}",
            "Token distribution snapshot",
            "Whitepaper tokenomics section",
        ],
    )


@template("tokenomics", "medium")
def tokenomics_medium(score: float, f: Facts) -> Narrative:
    contract = f.text("contract_address", "Contract address not disclosed")
    team = f.percent("team_allocation", "a significant share")
    vesting = f.count("vesting_months", "short")
    return Narrative(
        headline=f"Tokenomics {_pts(score)}: workable but insider-heavy",
        findings=[
            f"Contract: {contract}",
            f"Team allocation: {team}",
            f"Vesting: {vesting} months",
        ],
        red_flags=[
            "Unlock schedule front-loads *insider supply*",
        ],
        sources=[
            f"Block explorer: {contract}",
            "Token distribution snapshot",
        ],
    )


@template("tokenomics", "low")
def tokenomics_low(score: float, f: Facts) -> Narrative:
    contract = f.text("contract_address", "Contract address not disclosed")
    vesting = f.count("vesting_months", "multi-year")
    return Narrative(
        headline=f"Tokenomics {_pts(score)}: fair distribution",
        findings=[
            f"Contract: {contract}",
            f"Team tokens vest over {vesting} months",
            "Liquidity locked and ownership renounced or held by a timelock",
        ],
        red_flags=[],
        sources=[
            f"Block explorer: {contract}",
        ],
    )


# ── Fallback ──────────────────────────────────────────────────────────────────

def generic_template(metric_name: str, band: str, score: float, f: Facts) -> Narrative:
    """Boilerplate narrative for metrics without registered templates."""
    level = {"high": "High", "medium": "Moderate", "low": "Low"}[band]
    return Narrative(
        headline=f"{metric_name} {_pts(score)}: {level.lower()} risk signal",
        findings=[
            f"{level} risk level observed for {metric_name}",
            "No metric-specific narrative is available for this signal",
        ],
        red_flags=[f"{metric_name} scored in the high-risk band"] if band == "high" else [],
        sources=[f.text("source", "Sifter data collection")],
    )
