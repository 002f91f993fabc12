"""Draft tones: normalization, LLM prompts and canned templates."""
from __future__ import annotations

import re

from policy_monitor.schemas.policy import PolicyRecord

TONES: tuple[str, ...] = ("legal", "emotional", "dataBacked", "financial", "business", "livelihood")
DEFAULT_TONE = "legal"

# Tones drafted automatically for relevant policies and attached to notifications
NOTIFICATION_TONES: tuple[str, ...] = ("legal", "emotional", "dataBacked")

# (substring, tone); first hit wins
_TONE_ALIASES: list[tuple[str, str]] = [
    ("legal", "legal"),
    ("emotional", "emotional"),
    ("databacked", "dataBacked"),
    ("data", "dataBacked"),
    ("financial", "financial"),
    ("finance", "financial"),
    ("business", "business"),
    ("livelihood", "livelihood"),
    ("livinghood", "livelihood"),
]


def normalize_tone(tone: str | None) -> str:
    """Map any tone string to one of TONES ("Data-Backed!" -> "dataBacked")."""
    if not tone:
        return DEFAULT_TONE
    compact = re.sub(r"[^a-z]", "", tone.lower())
    for alias, canonical in _TONE_ALIASES:
        if alias in compact:
            return canonical
    return DEFAULT_TONE


TONE_PROMPTS: dict[str, str] = {
    "legal": (
        "Generate a formal, legal-focused response to this animal welfare policy consultation. "
        "Use professional legal language, reference relevant laws and regulations, and provide "
        "specific legal recommendations. The response should be authoritative and well-structured."
    ),
    "emotional": (
        "Generate an emotional, compassionate response to this animal welfare policy consultation. "
        "Appeal to empathy and compassion, use heartfelt language about animal suffering, and include "
        "persuasive emotional arguments. The response should be moving and compelling."
    ),
    "dataBacked": (
        "Generate a data-driven, evidence-based response to this animal welfare policy consultation. "
        "Include statistics, research findings, scientific studies, and economic analysis. Use "
        "evidence-based arguments and factual information to support recommendations."
    ),
    "financial": (
        "Generate a response that discusses how this policy might affect resources, planning, and "
        "long-term support for animal welfare. Consider how different groups and organizations could "
        "be supported to implement the policy successfully. Please provide a thoughtful and informative "
        "response suitable for a public policy discussion."
    ),
    "business": (
        "Generate a response that considers how organizations, companies, and workers involved with "
        "animals might experience changes due to this policy. Discuss practical considerations for "
        "those who work in related fields. Please provide a thoughtful and informative response "
        "suitable for a public policy discussion."
    ),
    "livelihood": (
        "Generate a response that explores how people and communities who care for or work with "
        "animals might be affected by this policy. Consider the well-being and daily lives of those "
        "in rural or animal-related roles. Please provide a thoughtful and informative response "
        "suitable for a public policy discussion."
    ),
}


def build_draft_prompt(policy: PolicyRecord, tone: str) -> str:
    instruction = TONE_PROMPTS[normalize_tone(tone)]
    return (
        f"{instruction}\n\n"
        "Policy Details:\n"
        f"Title: {policy.title}\n"
        f"Description: {policy.description}\n"
        f"Ministry: {policy.ministry}\n"
        f"Deadline: {policy.deadline}\n\n"
        "Requirements:\n"
        "- 300-500 words\n"
        "- Professional format suitable for government submission\n"
        "- Include specific recommendations\n"
        "- Address the policy's impact on animal welfare\n"
        "- Provide actionable suggestions\n\n"
        "Generate only the response text, no additional formatting or explanations."
    )


# ---------------------------------------------------------------------------
# Canned templates, used when the LLM is unreachable
# ---------------------------------------------------------------------------

_TEMPLATES: dict[str, str] = {
    "legal": """Subject: Response to {title}

Dear Sir/Madam,

I am writing to provide comments on the above-mentioned policy consultation. As a concerned citizen, I believe this policy has significant implications for animal welfare in India.

Legal Recommendations:
1. Ensure compliance with the Prevention of Cruelty to Animals Act, 1960
2. Align with Wildlife Protection Act, 1972 provisions
3. Include mandatory welfare standards and enforcement mechanisms
4. Establish clear penalties for non-compliance

I urge the ministry to consider these legal aspects to strengthen animal protection in our country.

Thank you for the opportunity to comment.

Sincerely,
[Your Name]""",
    "emotional": """Subject: Heartfelt Response to {title}

Dear Policy Makers,

I am deeply moved to respond to this important consultation that affects the lives of countless animals in our country.

Every animal deserves compassion, care, and protection from suffering. This policy represents an opportunity to show our humanity and moral responsibility toward the voiceless creatures who share our world.

I implore you to:
- Consider the emotional capacity of animals to feel pain and fear
- Implement measures that prioritize animal welfare above economic interests
- Remember that a society is judged by how it treats its most vulnerable members

Please let compassion guide your decisions.

With hope and respect,
[Your Name]""",
    "dataBacked": """Subject: Evidence-Based Response to {title}

Dear Committee Members,

I submit this data-driven response to support evidence-based policy making.

Key Statistics:
- India has over 300 million livestock animals requiring welfare protection
- Studies show improved animal welfare increases productivity by 15-20%
- Economic benefits of welfare standards outweigh implementation costs

Research Findings:
- Scientific evidence demonstrates animals' capacity for suffering
- International best practices show welfare standards improve outcomes
- Data indicates public support for stronger animal protection measures

I recommend implementing evidence-based welfare standards supported by scientific research.

Respectfully submitted,
[Your Name]""",
    "financial": """Subject: Financial Impact Analysis - {title}

Dear Financial Committee,

I am submitting this response to highlight the financial implications of the proposed animal welfare policy.

Economic Analysis:
- Long-term savings through reduced veterinary costs and improved productivity
- Potential for new employment opportunities in the welfare compliance sector
- Export market advantages through improved welfare standards

Financial Recommendations:
- Establish a dedicated welfare fund with government and industry contributions
- Implement a phased rollout to manage costs effectively
- Provide tax incentives for early adopters
- Create public-private partnerships for sustainable funding

Respectfully,
[Your Name]""",
    "business": """Subject: Business Impact Assessment - {title}

Dear Industry Relations Committee,

As a stakeholder in the animal-related business sector, I am providing feedback on the commercial implications of this policy.

Industry Considerations:
- Transition period needed for small and medium enterprises
- Training and capacity building requirements for the workforce
- Supply chain modifications to meet new standards
- Market differentiation opportunities through welfare certification

Business Recommendations:
- Provide an 18-24 month implementation timeline
- Establish industry consultation committees
- Develop technical assistance programs for SMEs

Best regards,
[Your Name]""",
    "livelihood": """Subject: Livelihood Impact Response - {title}

Dear Rural Development Committee,

I am writing to address the livelihood implications of this animal welfare policy on farming communities and rural populations.

Community Concerns:
- Training needs for new welfare practices
- Financial support during the transition period
- Market access for welfare-compliant products
- Preservation of traditional knowledge and practices

Livelihood Recommendations:
- Establish farmer education and training programs
- Provide subsidies and low-interest loans for compliance
- Ensure community participation in policy implementation

This policy must balance animal welfare with the economic security of the families whose livelihoods depend on animal husbandry.

With community solidarity,
[Your Name]""",
}


def template_draft(policy: PolicyRecord, tone: str) -> str:
    return _TEMPLATES[normalize_tone(tone)].format(title=policy.title)
