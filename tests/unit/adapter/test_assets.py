"""Tests for the login page and form_post rendering."""

from tollgate.adapter.assets import TemplateLoginAssetProvider
from tollgate.adapter.templating import create_template_environment
from tollgate.application.usecase.oauth import FormPostResponseRenderer

HOSTILE = '"><script>alert(1)</script>'


class TestLoginPage:
    """Tests for TemplateLoginAssetProvider."""

    def test_bindings_are_escaped(self):
        """Bound values are HTML-escaped into the built-in login page."""
        # Arrange
        provider = TemplateLoginAssetProvider(create_template_environment())

        # Act
        asset = provider.render(
            None, "de", {"client_id": "spa", "state": HOSTILE, "error_message": HOSTILE}
        )

        # Assert
        page = asset.content.decode()
        assert asset.media_type == "text/html"
        assert '<html lang="de">' in page
        assert 'name="client_id" value="spa"' in page
        assert "<script>" not in page
        assert "&lt;script&gt;" in page

    def test_missing_bindings_render_empty(self):
        provider = TemplateLoginAssetProvider(create_template_environment())

        page = provider.render(None, None, {"nonce": None}).content.decode()

        assert 'name="nonce" value=""' in page
        assert 'name="username" value=""' in page
        assert "None" not in page
        assert 'class="error"' not in page

    def test_configured_template_overrides_builtin(self, tmp_path):
        """A login.html in the asset folder replaces the built-in page."""
        # Arrange
        (tmp_path / "login.html").write_text("<h1>{{ bindings.client_id }}</h1>")
        provider = TemplateLoginAssetProvider(
            create_template_environment(tmp_path), tmp_path
        )

        # Act
        asset = provider.render(None, "en", {"client_id": "<spa>"})

        # Assert
        assert asset.content == b"<h1>&lt;spa&gt;</h1>"

    def test_serves_content_inside_folder_only(self, tmp_path):
        assets = tmp_path / "assets"
        assets.mkdir()
        (assets / "site.css").write_text("body {}")
        (tmp_path / "secret.txt").write_text("nope")
        provider = TemplateLoginAssetProvider(create_template_environment(), assets)

        css = provider.render("site.css", None, {})

        assert css.content == b"body {}"
        assert css.media_type == "text/css"
        assert provider.render("../secret.txt", None, {}) is None


class TestFormPostRenderer:
    """Tests for the form_post response mode."""

    def test_renders_escaped_auto_submit_form(self):
        """Parameters are posted back through an escaped hidden form."""
        # Arrange
        renderer = FormPostResponseRenderer(create_template_environment())

        # Act
        response = renderer.render(
            "https://app.example.org/cb?a=1&b=2",
            {"code": "abc", "state": HOSTILE, "nonce": None},
        )

        # Assert
        page = response.content.decode()
        assert response.status_code == 200
        assert 'action="https://app.example.org/cb?a=1&amp;b=2"' in page
        assert 'name="code" value="abc"' in page
        assert 'name="nonce"' not in page
        assert "<script>" not in page
        assert "document.forms[0].submit()" in page
