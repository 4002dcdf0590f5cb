import shutil

import pytest

from consent_theater.config import Config
from consent_theater.normalizer import transform_raw_app
from consent_theater.rules import dangerous_permission_names, load_rules


def test_bundled_tables(rules):
    assert len(rules.dangerous_permissions) == 15
    assert "READ_CONTACTS" in rules.dangerous_permissions
    assert rules.company_arpu_inr["Meta Platforms"] == 1040
    assert rules.default_arpu_inr == 100
    assert rules.base_age == 28
    assert set(rules.versions.values()) == {1}


def test_rules_are_cached(rules):
    assert load_rules() is rules
    assert dangerous_permission_names(rules) == list(rules.dangerous_permissions)


@pytest.fixture
def custom_rules_dir(tmp_path):
    target = tmp_path / "rules"
    shutil.copytree(Config.RULES_DIR, target)
    (target / "dangerous_permissions.yaml").write_text(
        "version: 2\nprefixes: ['android.permission.']\npermissions: [INTERNET]\n",
        encoding="utf-8",
    )
    return target


def test_substituted_taxonomy(custom_rules_dir):
    custom = load_rules(str(custom_rules_dir))
    assert custom.dangerous_permissions == ("INTERNET",)
    assert custom.versions["dangerous_permissions"] == 2

    app = transform_raw_app(
        {"packageName": "com.x", "permissions": ["android.permission.INTERNET", "android.permission.CAMERA"]},
        custom,
    )
    assert app.dangerous_permissions == ("INTERNET",)
    assert app.risk_score == 8


def test_non_mapping_file_rejected(custom_rules_dir):
    (custom_rules_dir / "company_colors.yaml").write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError, match="expecting mapping"):
        load_rules(str(custom_rules_dir))
