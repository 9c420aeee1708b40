"""
Framework detection patterns.

A framework scores 0.4 for a matching import, up to 0.3 for the share of
its idioms present in the text, 0.2 for a conventional filename and 0.1
for a declared dependency, times its base confidence.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable, Mapping, Sequence

from ..constants import (
    FRAMEWORK_CONFIDENCE_THRESHOLD,
    FRAMEWORK_DEPENDENCY_WEIGHT,
    FRAMEWORK_FILE_WEIGHT,
    FRAMEWORK_IDIOM_WEIGHT,
    FRAMEWORK_IMPORT_WEIGHT,
)
from ..core.text import line_of
from .models import FrameworkMatch, FrameworkRule, build_catalog
from .utils import extract_import_modules

logger = logging.getLogger(__name__)

FRAMEWORK_RULES: tuple[FrameworkRule, ...] = (
    FrameworkRule(
        rule_id="react",
        name="React",
        imports=(
            "react", "@react", "react-dom", "react-router", "react-router-dom", "react-redux",
            "@reduxjs/toolkit", "react-query", "@tanstack/react-query",
        ),
        idioms=(
            "useState", "useEffect", "useContext", "useReducer", "useMemo", "useCallback", "jsx",
            "tsx", "Component", "PureComponent", "createElement", "Fragment", "ReactDOM", "render",
            "createRoot", "StrictMode", "Suspense",
        ),
        files=(".jsx", ".tsx", "App.jsx", "App.tsx", "index.jsx", "index.tsx", "components/", "hooks/", "contexts/"),
        dependencies=("react", "react-dom", "react-scripts", "@types/react", "@types/react-dom"),
        base_confidence=0.9,
        security_considerations=(
            "Avoid exposing sensitive data in component state",
            "Be cautious with dangerouslySetInnerHTML",
            "Sanitize user inputs properly",
            "Use environment variables for configuration",
        ),
        recommendations=(
            "Review component logic before AI analysis",
            "Check for exposed API keys in environment variables",
            "Ensure state management doesn't contain sensitive data",
        ),
        version_package="react",
    ),
    FrameworkRule(
        rule_id="vue",
        name="Vue",
        imports=("vue", "@vue", "vue-router", "vuex", "pinia", "@vue/composition-api"),
        idioms=(
            "Vue", "createApp", "defineComponent", "ref", "reactive", "computed", "watch",
            "watchEffect", "onMounted", "onUpdated", "setup", "provide", "inject", "nextTick",
            "createRouter", "useRouter", "useRoute",
        ),
        files=(".vue", "main.js", "main.ts", "App.vue", "router/", "store/", "views/"),
        dependencies=("vue", "vue-router", "vuex", "pinia", "@vue/cli-service"),
        base_confidence=0.9,
        security_considerations=(
            "Sanitize v-html content",
            "Be careful with dynamic component rendering",
            "Validate props and data",
            "Use secure state management",
        ),
        recommendations=(
            "Review component composition and data flow",
            "Check for sensitive data in Vuex/Pinia stores",
            "Validate prop types and data structures",
        ),
        version_package="vue",
    ),
    FrameworkRule(
        rule_id="angular",
        name="Angular",
        imports=(
            "@angular", "@angular/core", "@angular/common", "@angular/forms", "@angular/router",
            "@angular/http", "@angular/platform-browser",
        ),
        idioms=(
            "@Component", "@Injectable", "@Module", "@Directive", "@Pipe", "NgModule", "OnInit",
            "OnDestroy", "ViewChild", "Input", "Output", "EventEmitter", "Observable", "Subject",
            "BehaviorSubject",
        ),
        files=(
            ".component.ts", ".service.ts", ".module.ts", ".directive.ts", ".pipe.ts",
            "app.module.ts", "main.ts", "angular.json",
        ),
        dependencies=("@angular/core", "@angular/cli", "@angular/common", "typescript", "rxjs"),
        base_confidence=0.95,
        security_considerations=(
            "Sanitize template content",
            "Use proper input validation",
            "Secure HTTP interceptors",
            "Implement proper authentication guards",
        ),
        recommendations=(
            "Review service implementations and dependency injection",
            "Check for sensitive data in component properties",
            "Validate HTTP client configurations",
        ),
        version_package="@angular/core",
    ),
    FrameworkRule(
        rule_id="node",
        name="Node.js",
        imports=(
            "express", "http", "https", "fs", "path", "util", "os", "crypto", "events", "stream",
            "buffer", "url", "querystring", "zlib",
        ),
        idioms=(
            "require(", "module.exports", "exports.", "process.env", "__dirname", "__filename",
            "Buffer", "global", "setImmediate", "clearImmediate", "server.listen", "app.listen",
            "createServer",
        ),
        files=(
            "server.js", "app.js", "index.js", "package.json", "node_modules/", "routes/",
            "controllers/", "middleware/", "models/",
        ),
        dependencies=("express", "nodemon", "cors", "body-parser", "helmet", "morgan"),
        base_confidence=0.8,
        security_considerations=(
            "Validate and sanitize all inputs",
            "Use secure environment variable management",
            "Implement proper error handling",
            "Use security middleware (helmet, etc.)",
        ),
        recommendations=(
            "Review server configuration and middleware",
            "Check for exposed environment variables",
            "Validate file system operations",
        ),
        is_server=True,
        version_package="node",
    ),
    FrameworkRule(
        rule_id="express",
        name="Express",
        imports=("express", "express-session", "express-validator", "express-rate-limit"),
        idioms=(
            "express()", "app.get", "app.post", "app.put", "app.delete", "app.use", "req.params",
            "req.query", "req.body", "res.json", "res.send", "res.status", "next()", "middleware",
            "router",
        ),
        files=("app.js", "server.js", "routes/", "middleware/", "controllers/"),
        dependencies=("express", "body-parser", "cors", "helmet", "compression"),
        base_confidence=0.85,
        security_considerations=(
            "Implement rate limiting",
            "Use CORS properly",
            "Sanitize request parameters",
            "Implement proper session management",
        ),
        recommendations=(
            "Review route handlers and middleware",
            "Check for exposed configuration",
            "Validate request processing logic",
        ),
        is_server=True,
        version_package="express",
    ),
    FrameworkRule(
        rule_id="nextjs",
        name="Next.js",
        imports=(
            "next", "next/", "next/app", "next/document", "next/head", "next/image", "next/link",
            "next/router", "next/dynamic",
        ),
        idioms=(
            "getServerSideProps", "getStaticProps", "getStaticPaths", "useRouter", "Head", "Image",
            "Link", "dynamic", "App", "Document", "_app", "_document",
        ),
        files=(
            "pages/", "_app.js", "_app.tsx", "_document.js", "_document.tsx", "next.config.js",
            "public/", "styles/", "api/",
        ),
        dependencies=("next", "react", "react-dom"),
        base_confidence=0.9,
        security_considerations=(
            "Secure API routes",
            "Be careful with getServerSideProps data",
            "Validate environment variables",
            "Implement proper CSP headers",
        ),
        recommendations=(
            "Review API route implementations",
            "Check getServerSideProps for data exposure",
            "Validate build-time and runtime configuration",
        ),
        is_server=True,
        version_package="next",
    ),
    FrameworkRule(
        rule_id="nuxt",
        name="Nuxt",
        imports=("nuxt", "@nuxt", "nuxt3", "@nuxt/kit"),
        idioms=(
            "defineNuxtConfig", "useNuxtApp", "navigateTo", "useFetch", "useAsyncData", "useState",
            "useCookie", "useHead", "NuxtLayout", "NuxtPage",
        ),
        files=(
            "nuxt.config.js", "nuxt.config.ts", "pages/", "layouts/", "components/", "plugins/",
            "middleware/", "server/", "assets/", "static/",
        ),
        dependencies=("nuxt", "@nuxt/kit", "vue"),
        base_confidence=0.9,
        security_considerations=(
            "Secure server-side rendering",
            "Validate asyncData and fetch",
            "Implement proper middleware",
            "Use secure module configuration",
        ),
        recommendations=(
            "Review server-side rendering logic",
            "Check asyncData and fetch implementations",
            "Validate module configurations",
        ),
        is_server=True,
        version_package="nuxt",
    ),
    FrameworkRule(
        rule_id="svelte",
        name="Svelte",
        imports=("svelte", "svelte/", "@sveltejs/kit"),
        idioms=(
            "onMount", "onDestroy", "beforeUpdate", "afterUpdate", "tick", "createEventDispatcher",
            "getContext", "setContext", "$:", "bind:",
        ),
        files=(".svelte", "svelte.config.js", "app.html", "routes/", "lib/"),
        dependencies=("svelte", "@sveltejs/kit", "@sveltejs/adapter-auto"),
        base_confidence=0.9,
        security_considerations=(
            "Sanitize dynamic content",
            "Validate component props",
            "Secure server-side logic",
            "Implement proper state management",
        ),
        recommendations=(
            "Review component logic and stores",
            "Check for sensitive data in component state",
            "Validate server-side kit configurations",
        ),
        version_package="svelte",
    ),
)

DEFAULT_FRAMEWORK_CATALOG = build_catalog(FRAMEWORK_RULES)

HIGH_CONFIDENCE_RECOMMENDATION = "High confidence framework detection - thorough review recommended"
_VERSION_RE = re.compile(r"(\d+\.\d+\.\d+)")


def module_matches(module: str, candidate: str) -> bool:
    """Whether ``module`` is ``candidate`` or one of its subpaths."""
    module = module.removeprefix("node:")
    if candidate.endswith("/"):
        return module.startswith(candidate)
    return module == candidate or module.startswith(candidate + "/")


class FrameworkMatcher:
    """Detects frameworks from imports, idioms, filename and dependencies."""

    def __init__(self, rules: Mapping[str, FrameworkRule] | Iterable[FrameworkRule] | None = None):
        if rules is None:
            self.catalog = DEFAULT_FRAMEWORK_CATALOG
        elif isinstance(rules, Mapping):
            self.catalog = rules
        else:
            self.catalog = build_catalog(rules)

    def detect(
        self,
        text: str,
        file_name: str | None = None,
        dependencies: Sequence[str] | None = None,
        imports: Sequence[str] | None = None,
    ) -> list[FrameworkMatch]:
        """Frameworks scoring above the threshold, most confident first.

        Args:
            text: Source text
            file_name: Name or path of the file the text came from
            dependencies: Declared package dependencies
            imports: Imported module names; derived from the text when not given
        """
        modules = list(imports) if imports is not None else extract_import_modules(text)
        lower_text = text.lower()
        results: list[FrameworkMatch] = []

        for rule in self.catalog.values():
            indicators: list[str] = []
            score = 0.0

            import_hits = [m for m in modules if any(module_matches(m, p) for p in rule.imports)]
            if import_hits:
                score += FRAMEWORK_IMPORT_WEIGHT
                indicators.append(f"Imports: {', '.join(import_hits)}")

            idiom_hits = [p for p in rule.idioms if p.lower() in lower_text]
            if idiom_hits:
                score += FRAMEWORK_IDIOM_WEIGHT * len(idiom_hits) / len(rule.idioms)
                indicators.append(f"Code patterns: {', '.join(idiom_hits)}")

            if file_name:
                file_hits = [f for f in rule.files if f in file_name]
                if file_hits:
                    score += FRAMEWORK_FILE_WEIGHT
                    indicators.append(f"File patterns: {', '.join(file_hits)}")

            if dependencies:
                dep_hits = [d for d in dependencies if any(module_matches(d, p) for p in rule.dependencies)]
                if dep_hits:
                    score += FRAMEWORK_DEPENDENCY_WEIGHT
                    indicators.append(f"Dependencies: {', '.join(dep_hits)}")

            score = min(score * rule.base_confidence, 1.0)
            if score <= FRAMEWORK_CONFIDENCE_THRESHOLD or not indicators:
                continue

            recommendations = list(rule.recommendations)
            if score > 0.8:
                recommendations.append(HIGH_CONFIDENCE_RECOMMENDATION)

            results.append(
                FrameworkMatch(
                    rule_id=rule.rule_id,
                    name=rule.name,
                    confidence=round(score, 4),
                    version=self._version(text, rule),
                    line=self._import_line(text, import_hits),
                    is_server=rule.is_server,
                    indicators=indicators,
                    security_considerations=list(rule.security_considerations),
                    recommendations=recommendations,
                )
            )

        results.sort(key=lambda r: r.confidence, reverse=True)
        if results:
            logger.debug(f"Frameworks detected: {[(r.rule_id, r.confidence) for r in results]}")
        return results

    def _version(self, text: str, rule: FrameworkRule) -> str | None:
        for pattern in rule.version_regexes:
            match = pattern.search(text)
            if match:
                version = _VERSION_RE.search(match.group(1))
                if version:
                    return version.group(1)
        return None

    def _import_line(self, text: str, modules: list[str]) -> int | None:
        for module in modules:
            found = re.search(rf"['\"]{re.escape(module)}['\"]", text)
            if found:
                return line_of(text, found.start())
        return None

    def primary(self, matches: Sequence[FrameworkMatch]) -> FrameworkMatch | None:
        return matches[0] if matches else None


_default_matcher = FrameworkMatcher()


def detect_frameworks(
    text: str,
    file_name: str | None = None,
    dependencies: Sequence[str] | None = None,
    imports: Sequence[str] | None = None,
) -> list[FrameworkMatch]:
    """Detect frameworks with the default catalog."""
    return _default_matcher.detect(text, file_name, dependencies, imports)
