"""
CPI Charts Module
全国・都市別CPIの可視化・チャート作成機能
"""

import plotly.graph_objects as go
from plotly.subplots import make_subplots

from ..config.settings import (
    CATEGORY_COLORS,
    CHART_CONFIG,
    CITIES,
    CITY_COLORS,
    DEFAULT_SETTINGS,
    KNOWN_ERROR_DATES,
)


def _inflation_color(value):
    """インフレ水準に応じた色"""
    if value > 3:
        return '#dc3545'  # 高インフレ（赤）
    elif value > 1:
        return '#fd7e14'  # 適度（オレンジ）
    elif value > 0:
        return '#28a745'  # 低水準（緑）
    return '#007bff'  # デフレ（青）


def add_error_date_markers(fig, dates=KNOWN_ERROR_DATES, row=None, col=None):
    """データエラーが判明している日付に縦線を追加"""
    for date in dates:
        kwargs = {}
        if row is not None:
            kwargs = dict(row=row, col=col)
        fig.add_vline(
            x=date,
            line_dash="dash",
            line_color="rgba(220,53,69,0.4)",
            **kwargs
        )
    return fig


def create_national_trend_chart(dataset, show_error_dates=True):
    """全国CPI推移チャートを作成"""
    df = dataset.to_frame()
    fig = go.Figure()

    if df.empty:
        return fig

    fig.add_trace(go.Scatter(
        x=df['DATE'],
        y=df['cpi'],
        mode='lines',
        name='National CPI',
        line=dict(color=CITY_COLORS['National'], width=3),
        hovertemplate=(
            "<b>National CPI</b><br>"
            "日付: %{x}<br>"
            "指数: %{y:.2f}<br>"
            "<extra></extra>"
        )
    ))

    # 基準値100ライン
    fig.add_hline(y=100, line_dash="dot", line_color="rgba(0,0,0,0.3)")
    if show_error_dates:
        add_error_date_markers(fig)

    fig.update_layout(
        title="全国CPI推移（基準日 = 100）",
        xaxis_title="日付",
        yaxis_title="指数",
        **CHART_CONFIG,
        height=DEFAULT_SETTINGS["chart_height"],
        showlegend=False
    )

    return fig


def create_regional_comparison_chart(dataset, cities=CITIES, show_error_dates=True):
    """全国と都市別CPIの比較チャート"""
    df = dataset.to_frame()
    fig = go.Figure()

    if df.empty:
        return fig

    fig.add_trace(go.Scatter(
        x=df['DATE'],
        y=df['cpi'],
        mode='lines',
        name='National',
        line=dict(color=CITY_COLORS['National'], width=3)
    ))

    for city in cities:
        if city.name not in df.columns:
            continue
        fig.add_trace(go.Scatter(
            x=df['DATE'],
            y=df[city.name],
            mode='lines',
            name=city.name,
            line=dict(color=CITY_COLORS.get(city.name, '#1f77b4'), width=2),
            connectgaps=False,
            hovertemplate=(
                f"<b>{city.name}</b><br>"
                "日付: %{x}<br>"
                "指数: %{y:.2f}<br>"
                "<extra></extra>"
            )
        ))

    if show_error_dates:
        add_error_date_markers(fig)

    fig.update_layout(
        title="都市別CPI比較",
        xaxis_title="日付",
        yaxis_title="指数",
        **CHART_CONFIG,
        height=DEFAULT_SETTINGS["chart_height"],
        showlegend=True,
        legend=dict(
            orientation="h",
            yanchor="bottom",
            y=1.02,
            xanchor="right",
            x=1
        )
    )

    return fig


def create_yoy_trend_chart(yoy_df, show_error_dates=True):
    """前年同期比推移チャート"""
    fig = go.Figure()
    if yoy_df.empty:
        return fig

    fig.add_trace(go.Scatter(
        x=yoy_df['DATE'],
        y=yoy_df['yoy'],
        mode='lines',
        name='YoY Inflation',
        line=dict(color='#d62728', width=3),
        hovertemplate=(
            "<b>YoY Inflation</b><br>"
            "日付: %{x}<br>"
            "前年同期比: %{y:.2f}%<br>"
            "<extra></extra>"
        )
    ))

    fig.add_hline(y=0, line_dash="dash", line_color="rgba(0,0,0,0.3)")
    if show_error_dates:
        add_error_date_markers(fig)

    fig.update_layout(
        title="前年同期比インフレ率の推移(%)",
        xaxis_title="日付",
        yaxis_title="前年同期比(%)",
        **CHART_CONFIG,
        height=DEFAULT_SETTINGS["chart_height"],
        showlegend=False
    )

    return fig


def create_mom_inflation_chart(dataset):
    """前ポイント比インフレ率のバーチャート"""
    df = dataset.to_frame()
    fig = go.Figure()
    if df.empty:
        return fig

    fig.add_trace(go.Bar(
        x=df['DATE'],
        y=df['inflation'],
        name='前月比',
        marker_color=[_inflation_color(v) for v in df['inflation']],
        opacity=0.8,
        hovertemplate=(
            "日付: %{x}<br>"
            "前月比: %{y:.2f}%<br>"
            "<extra></extra>"
        )
    ))

    fig.add_hline(y=0, line_dash="dash", line_color="rgba(0,0,0,0.3)")

    fig.update_layout(
        title="前月比インフレ率(%)",
        xaxis_title="日付",
        yaxis_title="変化率 (%)",
        **CHART_CONFIG,
        height=DEFAULT_SETTINGS["chart_height"],
        showlegend=False
    )

    return fig


def create_category_contribution_chart(contributions):
    """最新日の公式カテゴリ別寄与度チャート"""
    fig = go.Figure()
    if not contributions:
        return fig

    categories = sorted(contributions, key=contributions.get, reverse=True)
    values = [contributions[c] for c in categories]

    fig.add_trace(go.Bar(
        x=values,
        y=categories,
        orientation='h',
        marker_color=[CATEGORY_COLORS.get(c, '#1f77b4') for c in categories],
        opacity=0.85,
        hovertemplate=(
            "<b>%{y}</b><br>"
            "寄与: %{x:.2f}pt<br>"
            "<extra></extra>"
        )
    ))

    fig.update_layout(
        title="公式カテゴリ別寄与（最新日、全国）",
        xaxis_title="指数ポイント",
        **CHART_CONFIG,
        height=DEFAULT_SETTINGS["chart_height"],
        showlegend=False
    )

    return fig


def create_contribution_history_chart(contribution_df, yoy_df=None):
    """カテゴリ寄与度の積み上げ推移と前年同期比の統合チャート"""
    if contribution_df.empty:
        return go.Figure()

    fig = make_subplots(
        rows=2, cols=1,
        subplot_titles=("公式カテゴリ別寄与度（全国）", "前年同期比推移"),
        vertical_spacing=0.12,
        row_heights=[0.7, 0.3]
    )

    for category in contribution_df['Category'].unique():
        category_data = contribution_df[contribution_df['Category'] == category]
        fig.add_trace(
            go.Bar(
                x=category_data['DATE'],
                y=category_data['Contribution'],
                name=category,
                marker_color=CATEGORY_COLORS.get(category, '#1f77b4'),
                opacity=0.8,
                hovertemplate=(
                    f"<b>{category}</b><br>"
                    "日付: %{x}<br>"
                    "寄与: %{y:.2f}pt<br>"
                    "<extra></extra>"
                ),
                legendgroup="contribution"
            ),
            row=1, col=1
        )

    if yoy_df is not None and not yoy_df.empty:
        fig.add_trace(
            go.Scatter(
                x=yoy_df['DATE'],
                y=yoy_df['yoy'],
                mode='lines',
                name='YoY Inflation',
                line=dict(color='#000080', width=3),
                legendgroup="cpi"
            ),
            row=2, col=1
        )
        fig.add_hline(y=0, line_dash="solid", line_color="rgba(0,0,0,0.3)", row=2, col=1)

    fig.update_layout(
        title="CPI寄与度分析",
        height=800,
        **CHART_CONFIG,
        barmode='relative',  # 積み上げ棒グラフ
        showlegend=True,
        legend=dict(
            orientation="h",
            yanchor="bottom",
            y=-0.15,
            xanchor="center",
            x=0.5
        )
    )

    fig.update_yaxes(title_text="指数ポイント", row=1, col=1)
    fig.update_yaxes(title_text="前年同期比(%)", row=2, col=1)

    return fig
