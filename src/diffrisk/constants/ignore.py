"""Built-in ignore patterns for changed files."""

from __future__ import annotations

# Never evaluated: lockfiles, build output, dependencies, editor state.
ALWAYS_IGNORE: tuple[str, ...] = (
    "**/package-lock.json",
    "**/yarn.lock",
    "**/pnpm-lock.yaml",
    "**/composer.lock",
    "**/Gemfile.lock",
    "**/Cargo.lock",
    "**/poetry.lock",
    "**/dist/**",
    "**/build/**",
    "**/out/**",
    "**/.next/**",
    "**/.nuxt/**",
    "**/.output/**",
    "**/coverage/**",
    "**/node_modules/**",
    "**/vendor/**",
    "**/bower_components/**",
    "**/.idea/**",
    "**/.vscode/**",
    "**/.git/**",
    "**/.DS_Store",
    "**/Thumbs.db",
)

# Generated code, type declarations, bundles, docs and static assets.
DEFAULT_IGNORE: tuple[str, ...] = (
    "**/*.generated.{ts,js}",
    "**/generated/**",
    "**/*.gen.{ts,js}",
    "**/*.d.ts",
    "**/*.min.{js,css}",
    "**/*.map",
    "**/bundle.js",
    "**/chunk-*.js",
    "**/vendor.js",
    "**/docs/**",
    "**/documentation/**",
    "**/assets/**",
    "**/public/**",
    "**/static/**",
    "**/*.{png,jpg,jpeg,gif,svg,ico}",
    "**/*.{woff,woff2,ttf,eot}",
)

TEST_PATTERNS: tuple[str, ...] = (
    "**/*.{test,spec}.{ts,tsx,js,jsx}",
    "**/__tests__/**",
    "**/__mocks__/**",
    "**/test/**",
    "**/tests/**",
    "**/*.stories.{ts,tsx,js,jsx}",
)

CONFIG_PATTERNS: tuple[str, ...] = (
    "**/.*rc",
    "**/.*rc.{js,json,yml,yaml}",
    "**/*.config.{js,ts,mjs}",
    "**/tsconfig.json",
    "**/jsconfig.json",
    "**/package.json",
    "**/{webpack,vite,rollup,babel,jest,vitest,tailwind,postcss,next,nuxt}.config.*",
)

IGNORE_REASONS: dict[str, tuple[str, str]] = {
    "always": (
        "lockfile, build output or dependency directory",
        "cannot be included",
    ),
    "test": (
        "test file, excluded by default",
        "pass --include-tests or set ignore.include_tests: true",
    ),
    "config": (
        "config file, excluded by default",
        "pass --include-config or set ignore.include_config: true",
    ),
    "default": (
        "generated file, type declaration or asset",
        "set ignore.override_defaults: true",
    ),
    "user": (
        "matches ignore.patterns in config",
        "remove the pattern from ignore.patterns",
    ),
}
