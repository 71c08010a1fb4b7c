# tests/test_tools_api.py
import pytest
from fastapi.testclient import TestClient
from galaxion.services import business_tools


class TestRiskCalculator:

    def test_scores_add_up(self):
        result = business_tools.calculate_risk(["personal", "health"], "decision-making", ["Potential for bias"])
        assert result["overall_risk_score"] == 95
        assert result["overall_risk_level"] == "high"
        assert result["risks"] == [{
            "category": "Potential for bias", "level": "high", "score": 20,
            "description": "Risk related to: Potential for bias",
        }]

    def test_score_is_capped(self):
        result = business_tools.calculate_risk(
            ["biometric", "health"], "decision-making", ["High-stakes outcomes", "Sensitive personal data"]
        )
        assert result["overall_risk_score"] == 100

    def test_levels(self):
        assert business_tools.calculate_risk(["personal"], "generation", [])["overall_risk_level"] == "low"
        medium = business_tools.calculate_risk(["personal"], "generation", ["Cross-border data transfer"])
        assert medium["overall_risk_score"] == 45
        assert medium["overall_risk_level"] == "medium"
        assert medium["risks"][0]["level"] == "medium"


class TestEthics:

    def test_category_scores_and_readiness(self):
        answers = {"0-0": True, "0-1": True, "0-2": True, "1-0": True, "1-1": True, "1-2": False,
                   "3-0": True, "3-1": True, "3-2": True}
        result = business_tools.assess_ethics(answers)
        scores = {item["category"]: item["score"] for item in result["risk_categories"]}
        assert scores == {"bias": 100, "transparency": 67, "privacy": 0, "reliability": 100}
        assert result["overall_score"] == 67
        assert result["readiness_level"] == "medium"
        assert result["priority_actions"] == ["Improve privacy"]
        assert result["compliance_status"] == {"gdpr": "needs-work", "ethics": "requires-attention"}

    def test_all_positive(self):
        answers = {f"{category}-{question}": True for category in range(4) for question in range(3)}
        result = business_tools.assess_ethics(answers)
        assert result["overall_score"] == 100
        assert result["readiness_level"] == "high"
        assert result["priority_actions"] == []
        assert result["compliance_status"] == {"gdpr": "compliant", "ethics": "good"}

    def test_priority_actions_are_limited(self):
        result = business_tools.assess_ethics({})
        assert result["readiness_level"] == "low"
        assert len(result["priority_actions"]) == 3

    def test_half_point_overall_rounds_up(self):
        answers = {f"{category}-{question}": True for category in (0, 1) for question in range(3)}
        answers.update({"2-0": True, "3-0": True})
        result = business_tools.assess_ethics(answers)
        assert [item["score"] for item in result["risk_categories"]] == [100, 100, 33, 33]
        # 66.5 on average
        assert result["overall_score"] == 67


@pytest.mark.api
class TestToolsApi:

    def test_list(self, client: TestClient):
        tools = client.get("/api/tools/list").json()["tools"]
        assert {tool["id"] for tool in tools} == {"lightning-ethics", "risk-calculator", "compliance-checker"}

    def test_risk_calculator(self, client: TestClient):
        response = client.post("/api/tools/risk-calculator", json={
            "project_domain": "banking", "data_types": ["financial"], "ai_type": "decision-making",
            "risk_factors": ["Black-box algorithms"],
        })
        assert response.status_code == 200
        data = response.json()
        assert data["tool_id"] == "risk-calculator"
        assert data["results"]["overall_risk_score"] == 65
        assert data["results"]["overall_risk_level"] == "medium"

    def test_lightning_ethics_echoes_project(self, client: TestClient):
        response = client.post("/api/tools/lightning-ethics", json={
            "project_type": "chatbot", "answers": {"0-0": True},
        })
        results = response.json()["results"]
        assert results["project_type"] == "chatbot"
        assert results["risk_categories"][0]["score"] == 33

    def test_compliance_checker(self, client: TestClient):
        response = client.post("/api/tools/compliance-checker", json={
            "region": "EU", "processing_purpose": ["analytics"], "data_subjects": ["children"],
        })
        results = response.json()["results"]
        assert results["compliance_score"] == 75
        assert results["violations"][0]["law"] == "GDPR"

        global_check = client.post("/api/tools/compliance-checker", json={"region": "Global", "data_schema": ["consent"],
                                                                          "processing_purpose": ["analytics"]}).json()
        assert [violation["law"] for violation in global_check["results"]["violations"]] == ["152-FZ"]

    def test_invalid_region_is_400(self, client: TestClient):
        assert client.post("/api/tools/compliance-checker", json={"region": "Mars"}).status_code == 400

    def test_cases_by_industry(self, client: TestClient):
        assert len(client.get("/api/tools/cases").json()["cases"]) == 3
        retail = client.get("/api/tools/cases", params={"industry": "Retail"}).json()["cases"]
        assert [case["id"] for case in retail] == [1, 3]
