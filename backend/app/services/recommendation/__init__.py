"""Recommendation engine — creator destination ranking.

Modules:
    config          Centralized thresholds, weights and configuration
    models          Data structures handed between pipeline stages
    enrichment      Concurrent per-destination signal assembly with fallbacks
    budget_banding  Aligned / Stretch / Out-of-Band classification and trip costs
    creator_gating  Active-creator counting and collaboration score
    processor       Hard filter → score → gate → rank orchestration

Pipeline:
    SignalEnricher.enrich → RecommendationProcessor.process
    (budget_banding → scoring_engine → creator_gating → Top-3)
"""
