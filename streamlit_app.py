#!/usr/bin/env python3
"""
Streamlit MTG Deck Analyzer - Web App Version
"""

import random
from dataclasses import asdict

import pandas as pd
import plotly.express as px
import streamlit as st

import config
from config import AnalyzerConfig
from deck_parser import DeckParser
from land_classifier import land_category_breakdown
from scryfall_api import ScryfallAPI
from simulator import simulate_early_game, simulate_key_card_draw_rate, simulate_opening_hands
from synergy import analyze_deck_synergies, SYNERGY_DETECTORS, KIND_BONUS

EXAMPLE_DECK = """4 Llanowar Elves (DOM) 168
4 Elvish Mystic (M14) 173
4 Elvish Archdruid (M20) 171
4 Heritage Druid (MOR) 126
4 Dwynen's Elite (ORI) 175
4 Elvish Visionary (M20) 172
4 Timberwatch Elf (LGN) 140
4 Craterhoof Behemoth (AVR) 172
4 Collected Company (DTK) 177
24 Forest (M21) 274

Sideboard
2 Naturalize (M19) 190"""

CHART_LAYOUT = dict(
    showlegend=False,
    paper_bgcolor='rgba(0,0,0,0)',
    plot_bgcolor='rgba(0,0,0,0)',
    font=dict(color='white', size=12),
    xaxis=dict(gridcolor='rgba(102, 126, 234, 0.1)', linecolor='rgba(102, 126, 234, 0.3)'),
    yaxis=dict(gridcolor='rgba(102, 126, 234, 0.1)', linecolor='rgba(102, 126, 234, 0.3)'),
)

SETTINGS = AnalyzerConfig.from_env()

# Page configuration
st.set_page_config(
    page_title="🃏 MTG Deck Analyzer",
    page_icon="🃏",
    layout="wide",
    initial_sidebar_state="collapsed"
)

st.markdown("""
<style>
    [data-testid="stMetricValue"] {
        font-size: 2rem;
        font-weight: 700;
        background: linear-gradient(135deg, #667eea 0%, #764ba2 100%);
        -webkit-background-clip: text;
        -webkit-text-fill-color: transparent;
    }

    .stTextArea > div > div > textarea {
        background: rgba(255, 255, 255, 0.05);
        border: 1px solid rgba(102, 126, 234, 0.2);
        border-radius: 8px;
        font-family: 'Monaco', monospace;
    }

    .js-plotly-plot {
        border-radius: 12px;
        background: rgba(255, 255, 255, 0.03);
        padding: 1rem;
    }

    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}
</style>
""", unsafe_allow_html=True)


@st.cache_resource
def get_api() -> ScryfallAPI:
    """One client per server process so the card cache survives reruns."""
    return ScryfallAPI.from_config(SETTINGS)


def render_opening_hands(opening):
    col1, col2 = st.columns(2)
    with col1:
        st.metric("Average Lands", f"{opening.average_lands:.2f}")
    with col2:
        st.metric("Keepable Hands (2-5 lands)", f"{opening.keepable_hand_rate:.1f}%")

    lands = [str(n) for n in sorted(opening.land_distribution)]
    rates = [opening.land_distribution[n] for n in sorted(opening.land_distribution)]
    fig_hands = px.bar(
        x=lands,
        y=rates,
        title=f"Lands in Opening Hand ({opening.total_simulations} simulations)",
        labels={'x': 'Lands', 'y': '% of Hands'}
    )
    fig_hands.update_layout(**CHART_LAYOUT)
    fig_hands.update_traces(
        hovertemplate='%{x} lands<br>%{y:.1f}% of hands<extra></extra>',
        marker=dict(color='#667eea', line=dict(color='#764ba2', width=1))
    )
    st.plotly_chart(fig_hands, use_container_width=True)

    if opening.color_requirements:
        st.markdown("#### Turn 1 Color Access")
        color_cols = st.columns(len(opening.color_requirements))
        for idx, (color, rate) in enumerate(opening.color_requirements.items()):
            with color_cols[idx]:
                st.metric(config.COLOR_NAMES.get(color, color), f"{rate:.1f}%")


def render_early_game(early, mainboard):
    turn_cols = st.columns(4)
    for idx, turn in enumerate(config.EARLY_TURNS):
        with turn_cols[idx]:
            st.metric(f"Turn {turn} Play", f"{early.playable_rate(turn):.1f}%")
    with turn_cols[3]:
        st.metric("Curve Out", f"{early.curve_out_rate:.1f}%")

    st.markdown("#### Land Breakdown")
    breakdown = land_category_breakdown(mainboard)
    land_df = pd.DataFrame(
        [{"Category": category.value.title(), "Lands": count} for category, count in breakdown.items()]
    )
    st.dataframe(land_df, hide_index=True, use_container_width=True)


def render_key_cards(mainboard, simulations, rng):
    names = sorted({entry.card.name for entry in mainboard if not entry.card.is_land})
    selected = st.multiselect("Cards to track", names, default=names[:3])
    if not selected:
        st.info("Pick one or more cards to see how often you draw them")
        return

    rows = []
    for name in selected:
        stats = simulate_key_card_draw_rate(mainboard, name, simulations, rng)
        rows.append({
            "Card": stats.card_name,
            "Opening Hand %": round(stats.opening_hand_rate, 1),
            "By Turn 3 %": round(stats.turn3_rate, 1),
            "By Turn 4 %": round(stats.turn4_rate, 1),
        })
    st.dataframe(pd.DataFrame(rows), hide_index=True, use_container_width=True)


def render_synergies(analysis):
    st.metric("Synergy Score", f"{analysis.overall_score:.1f}/10")

    active = analysis.active_categories()
    if not active:
        st.info("No notable synergies detected")
    else:
        synergy_df = pd.DataFrame(active, columns=["Category", "Score"])
        fig_synergy = px.bar(
            synergy_df,
            x="Score",
            y="Category",
            orientation='h',
            range_x=[0, 10],
            title="Active Synergies"
        )
        fig_synergy.update_layout(**CHART_LAYOUT)
        fig_synergy.update_traces(marker=dict(color='#667eea'))
        st.plotly_chart(fig_synergy, use_container_width=True)

        for detector in SYNERGY_DETECTORS:
            if detector.kind == KIND_BONUS:
                continue
            results = detector.results_from(analysis)
            if not results:
                continue
            with st.expander(f"{detector.name} ({max(r.score for r in results)}/10)"):
                for result in results:
                    st.json(asdict(result))

    if analysis.keyword_clusters:
        st.markdown("#### Keyword Clusters")
        st.dataframe(
            pd.DataFrame([
                {"Keyword": c.keyword, "Copies": c.count, "Cards": ", ".join(c.cards)}
                for c in analysis.keyword_clusters
            ]),
            hide_index=True,
            use_container_width=True,
        )


# ===== PAGE =====

st.title("🃏 MTG Deck Analyzer")
st.caption("Opening hand simulation and synergy detection powered by Scryfall")

if 'decklist_text' not in st.session_state:
    st.session_state.decklist_text = ""

col_input, col_options = st.columns([3, 1])
with col_options:
    simulations = st.number_input("Simulations", min_value=1, max_value=100000,
                                  value=SETTINGS.simulations, step=500)
    seed_text = st.text_input("Seed (optional)", value="" if SETTINGS.seed is None else str(SETTINGS.seed))
    if st.button("📋 Use Example Deck", type="secondary"):
        st.session_state.decklist_text = EXAMPLE_DECK
        st.rerun()

with col_input:
    decklist_text = st.text_area(
        "Decklist",
        key="decklist_text",
        height=260,
        placeholder=EXAMPLE_DECK,
        help="Supports '4 Card Name', '4x Card Name' and '4 Card Name (SET) 123'",
    )

if st.button("🔍 Analyze Deck", type="primary", disabled=not decklist_text.strip()):
    try:
        decklist = DeckParser().parse_text(decklist_text)
    except ValueError as e:
        st.error(f"Error parsing deck: {e}")
        st.stop()

    with st.spinner("🔍 Fetching cards and running simulations..."):
        deck, missing = get_api().build_deck(decklist)
        if missing:
            st.warning(f"Could not find information for {len(missing)} cards: {', '.join(missing)}")
        if not deck.mainboard:
            st.error("None of the mainboard cards could be resolved")
            st.stop()

        rng = random.Random(int(seed_text)) if seed_text.strip().isdigit() else random.Random()
        st.session_state.analysis_results = {
            "mainboard": deck.mainboard,
            "opening": simulate_opening_hands(deck.mainboard, int(simulations), rng),
            "early": simulate_early_game(deck.mainboard, int(simulations), rng),
            "synergy": analyze_deck_synergies(deck.mainboard),
            "simulations": int(simulations),
            "seed": seed_text,
        }

results = st.session_state.get('analysis_results')
if results:
    st.success(f"✅ Analysis complete! {sum(e.quantity for e in results['mainboard'])} mainboard cards")
    tab_hands, tab_early, tab_keys, tab_synergy = st.tabs(
        ["Opening Hands", "Early Game", "Key Cards", "Synergies"]
    )
    with tab_hands:
        render_opening_hands(results["opening"])
    with tab_early:
        render_early_game(results["early"], results["mainboard"])
    with tab_keys:
        key_seed = results["seed"]
        key_rng = random.Random(int(key_seed)) if key_seed.strip().isdigit() else random.Random()
        render_key_cards(results["mainboard"], results["simulations"], key_rng)
    with tab_synergy:
        render_synergies(results["synergy"])
