# galaxion/services/business_tools.py
"""Rule-based assessment tools for business learners: AI project risk, ethics readiness and compliance."""
from galaxion.utils.logger import logger
from galaxion.utils.numbers import round_half_up

TOOLS = [
    {
        "id": "lightning-ethics",
        "name": "Lightning Lab: 20-minute ethics audit",
        "description": "Quick ethics readiness check of an AI project with a report for management",
        "estimated_duration": 20,
        "difficulty": 1,
    },
    {
        "id": "risk-calculator",
        "name": "Risk Calculator",
        "description": "Risk assessment of an AI project",
        "estimated_duration": 5,
        "difficulty": 1,
    },
    {
        "id": "compliance-checker",
        "name": "Compliance Checker",
        "description": "GDPR and Russian 152-FZ compliance check",
        "estimated_duration": 10,
        "difficulty": 2,
    },
]

DATA_TYPE_SCORES = {
    "personal": 20,
    "financial": 25,
    "health": 30,
    "biometric": 35,
}

AI_TYPE_SCORES = {
    "decision-making": 25,
    "generation": 15,
}

RISK_FACTOR_SCORES = {
    "Automated decision-making": 20,
    "High-stakes outcomes": 25,
    "Sensitive personal data": 30,
    "Potential for bias": 20,
    "Black-box algorithms": 15,
    "Cross-border data transfer": 10,
    "Regulatory compliance required": 15,
    "Public-facing application": 10,
}

RISK_RECOMMENDATIONS = [
    "Run an additional bias assessment",
    "Implement an audit trail",
    "Add human-in-the-loop reviews",
]

# Each ethics category is answered through three yes/no questions keyed "<category index>-<question index>".
ETHICS_CATEGORIES = [
    {
        "key": "bias",
        "name": "Data bias",
        "issues": ["Representativeness of the data is not checked", "No fairness testing"],
        "recommendations": ["Audit the data for representativeness", "Introduce fairness testing"],
    },
    {
        "key": "transparency",
        "name": "Transparency",
        "issues": ["Decisions are hard to explain", "No way to appeal a decision"],
        "recommendations": ["Add explainability components", "Write user-friendly explanations"],
    },
    {
        "key": "privacy",
        "name": "Privacy",
        "issues": ["Possible GDPR / 152-FZ violations", "Excessive data collection"],
        "recommendations": ["Apply privacy by design", "Minimise the data collected"],
    },
    {
        "key": "reliability",
        "name": "Reliability",
        "issues": ["Edge cases are not tested", "No rollback plan"],
        "recommendations": ["Extend test coverage", "Set up a monitoring dashboard"],
    },
]
QUESTIONS_PER_CATEGORY = 3
PRIORITY_ACTION_LIMIT = 3


def list_tools() -> list[dict]:
    return TOOLS


def level_for_score(score: int, high: int, medium: int) -> str:
    if score >= high:
        return "high"
    if score >= medium:
        return "medium"
    return "low"


def calculate_risk(data_types: list[str], ai_type: str | None, risk_factors: list[str]) -> dict:
    """Adds up fixed scores for data types, the AI type and selected risk factors, capped at 100."""
    score = sum(DATA_TYPE_SCORES.get(data_type, 0) for data_type in set(data_types))
    score += AI_TYPE_SCORES.get(ai_type or "", 0)

    risks = []
    for factor in risk_factors:
        factor_score = RISK_FACTOR_SCORES.get(factor, 0)
        score += factor_score
        risks.append({
            "category": factor,
            "level": level_for_score(factor_score, high=20, medium=10),
            "score": factor_score,
            "description": f"Risk related to: {factor}",
        })

    overall = min(100, score)
    level = level_for_score(overall, high=70, medium=40)
    logger.info(f"Risk calculator: raw score {score}, overall {overall} ({level})")
    return {
        "overall_risk_score": overall,
        "overall_risk_level": level,
        "risks": risks,
        "recommendations": RISK_RECOMMENDATIONS,
    }


def category_score(answers: dict[str, bool], category_index: int) -> int:
    keys = [f"{category_index}-{question}" for question in range(QUESTIONS_PER_CATEGORY)]
    positive = sum(1 for key in keys if answers.get(key) is True)
    return round_half_up(100 * positive / len(keys))


def assess_ethics(answers: dict[str, bool], project: dict | None = None) -> dict:
    categories = []
    for index, category in enumerate(ETHICS_CATEGORIES):
        categories.append({
            "category": category["key"],
            "name": category["name"],
            "score": category_score(answers, index),
            "issues": category["issues"],
            "recommendations": category["recommendations"],
        })

    overall = round_half_up(sum(item["score"] for item in categories) / len(categories))
    priority_actions = [
        f"Improve {item['name'].lower()}" for item in categories if item["score"] < 60
    ][:PRIORITY_ACTION_LIMIT]

    logger.info(f"Lightning ethics assessment: overall {overall}")
    return {
        **(project or {}),
        "overall_score": overall,
        "readiness_level": level_for_score(overall, high=80, medium=60),
        "risk_categories": categories,
        "priority_actions": priority_actions,
        "compliance_status": {
            "gdpr": "compliant" if overall >= 70 else "needs-work",
            "ethics": "good" if overall >= 75 else "requires-attention",
        },
    }


def check_compliance(region: str, processing_purpose: list[str], data_subjects: list[str], data_schema: list[str]) -> dict:
    violations = []
    warnings = []
    if region in ("EU", "Global"):
        if "analytics" in processing_purpose and "consent" not in data_schema:
            violations.append({
                "law": "GDPR",
                "article": "Article 6",
                "severity": "high",
                "description": "No lawful basis for processing personal data for analytics",
            })
        if "children" in data_subjects:
            warnings.append({
                "law": "GDPR",
                "recommendation": "Data of minors requires special protection (Article 8)",
            })
    if region in ("RF", "Global"):
        violations.append({
            "law": "152-FZ",
            "article": "Article 18",
            "severity": "medium",
            "description": "Personal data of Russian citizens must be stored in Russia",
        })

    score = max(0, 100 - len(violations) * 20 - len(warnings) * 5)
    logger.info(f"Compliance check for region {region}: score {score}, {len(violations)} violations")
    return {
        "compliance_score": score,
        "violations": violations,
        "warnings": warnings,
    }
