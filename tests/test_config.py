from printshop_pricing.config.settings import Settings


def test_defaults_under_project_root(tmp_path, monkeypatch):
    for var in ("PRINTSHOP_DATA_DIR", "PRINTSHOP_TAX_RATE", "PRINTSHOP_LOG_LEVEL",
                "PRINTSHOP_HOME_STATE", "PRINTSHOP_API_HOST", "PRINTSHOP_API_PORT"):
        monkeypatch.delenv(var, raising=False)

    settings = Settings.load(project_root=tmp_path)

    assert settings.data_dir == tmp_path / "data"
    assert settings.pricing_settings_path == tmp_path / "data" / "pricing_settings.json"
    assert settings.coupons_csv == tmp_path / "data" / "coupons.csv"
    assert settings.tax_rate == 0.18
    assert settings.log_level == "INFO"
    assert settings.home_state == "TN"
    assert settings.api_host == "0.0.0.0"
    assert settings.api_port == 8000


def test_environment_overrides(tmp_path, monkeypatch):
    monkeypatch.setenv("PRINTSHOP_DATA_DIR", str(tmp_path / "store"))
    monkeypatch.setenv("PRINTSHOP_TAX_RATE", "0.05")
    monkeypatch.setenv("PRINTSHOP_LOG_LEVEL", "debug")
    monkeypatch.setenv("PRINTSHOP_HOME_STATE", " ka ")
    monkeypatch.setenv("PRINTSHOP_API_HOST", "127.0.0.1")
    monkeypatch.setenv("PRINTSHOP_API_PORT", "9100")

    settings = Settings.load(project_root=tmp_path)

    assert settings.coupons_csv == tmp_path / "store" / "coupons.csv"
    assert settings.tax_rate == 0.05
    assert settings.log_level == "DEBUG"
    assert settings.home_state == "KA"
    assert settings.api_host == "127.0.0.1"
    assert settings.api_port == 9100
    assert settings.ensure_data_dir().is_dir()
