"""
Bolivia CPI Tracker - Main Application
ボリビア合成消費者物価指数（CPI）ダッシュボード

起動: streamlit run cpi_bolivia/main.py
"""

import streamlit as st
import pandas as pd
from datetime import datetime

from cpi_bolivia.config.settings import (
    CITIES, DEFAULT_BASKET, DEFAULT_SETTINGS, KNOWN_ERROR_DATES
)
from cpi_bolivia.data.loader import load_cpi_dataset
from cpi_bolivia.data.processor import calculate_inflation_metrics, get_inflation_trend_status
from cpi_bolivia.data.export import prepare_export_data, build_methodology_text
from cpi_bolivia.analysis.national import compute_yoy_series
from cpi_bolivia.analysis.contribution import (
    calculate_contribution_history, get_latest_contribution_summary
)
from cpi_bolivia.visualization.charts import (
    create_national_trend_chart, create_regional_comparison_chart,
    create_yoy_trend_chart, create_mom_inflation_chart,
    create_category_contribution_chart, create_contribution_history_chart
)
from cpi_bolivia.errors import CPIDataError
from cpi_bolivia.logging_setup import configure_logging


def configure_page():
    """ページ設定"""
    st.set_page_config(
        page_title=DEFAULT_SETTINGS["page_title"],
        page_icon=DEFAULT_SETTINGS["page_icon"],
        layout=DEFAULT_SETTINGS["layout"]
    )


@st.cache_data(ttl=DEFAULT_SETTINGS["cache_ttl"], show_spinner=False)
def load_dataset():
    """全国CPIデータセットを取得（1時間キャッシュ）"""
    return load_cpi_dataset()


def render_sidebar():
    """サイドバーUI"""
    st.sidebar.header("📊 Bolivia CPI Tracker")
    st.sidebar.markdown("**スーパー価格による合成CPI**")

    view = st.sidebar.selectbox(
        "🔍 表示",
        ["📈 全国・都市別推移", "📊 カテゴリ寄与度"],
        key="view"
    )

    with st.sidebar.expander("⚙️ 詳細設定"):
        show_error_dates = st.checkbox("データエラー日を表示", value=True, key="show_error_dates")
        show_mom = st.checkbox("前月比チャートを表示", value=False, key="show_mom")

    if st.sidebar.button("🔄 データ再取得"):
        load_dataset.clear()

    return view, show_error_dates, show_mom


def render_metrics(dataset):
    """主要指標カード"""
    metrics = calculate_inflation_metrics(dataset)

    col1, col2, col3, col4 = st.columns(4)
    with col1:
        st.metric("全国CPI", f"{dataset.current_index_value:.2f}", help="都市ウェイト加重平均（SCZ, LPZ, CBB）")
    with col2:
        st.metric("前月比", f"{dataset.current_mom_inflation:+.2f}%")
    with col3:
        st.metric(
            "前年同期比",
            f"{dataset.yoy_inflation:+.2f}%",
            delta=get_inflation_trend_status(dataset.yoy_inflation),
            delta_color="off"
        )
    with col4:
        st.metric("最新データ", dataset.most_recent_date)

    if 'volatility' in metrics:
        st.caption(f"ボラティリティ（前ポイント比の標準偏差）: {metrics['volatility']:.2f}%")


def prepare_summary_table(dataset):
    """全国・都市別指数のサマリーテーブル（直近分）"""
    table = prepare_export_data(dataset, CITIES).tail(30).iloc[::-1].copy()
    table['データ品質'] = table['Date'].map(
        lambda d: "⚠️ データエラーの可能性" if d in KNOWN_ERROR_DATES else "✅"
    )
    return table


def render_trend_view(dataset, show_error_dates, show_mom):
    """全国・都市別推移"""
    st.header("📈 全国・都市別CPI推移")

    st.plotly_chart(create_national_trend_chart(dataset, show_error_dates))
    st.plotly_chart(create_regional_comparison_chart(dataset, CITIES, show_error_dates))

    yoy_df = compute_yoy_series(dataset.points)
    if yoy_df.empty:
        st.info("前年同期比を計算できる1年前のデータがありません。")
    else:
        st.plotly_chart(create_yoy_trend_chart(yoy_df, show_error_dates))

    if show_mom:
        st.plotly_chart(create_mom_inflation_chart(dataset))

    st.subheader("📋 直近データ")
    st.dataframe(prepare_summary_table(dataset))


def render_contribution_view(dataset):
    """カテゴリ寄与度"""
    st.header("📊 公式カテゴリ寄与度")

    st.plotly_chart(
        create_category_contribution_chart(dataset.current_category_contributions)
    )

    summary = get_latest_contribution_summary(dataset.current_category_contributions)
    if summary:
        cols = st.columns(len(summary))
        for i, (category, data) in enumerate(summary.items()):
            with cols[i]:
                st.metric(
                    label=category,
                    value=f"{data['contribution']:.2f}pt",
                    delta=f"構成比: {data['share']:.1f}%",
                    delta_color="off"
                )

    with st.spinner("🔢 寄与度の推移を計算中..."):
        history = calculate_contribution_history(dataset, CITIES)
        yoy_df = compute_yoy_series(dataset.points)
    st.plotly_chart(create_contribution_history_chart(history, yoy_df))


def render_export_section(dataset):
    """データエクスポート"""
    with st.expander("💾 データエクスポート"):
        col1, col2 = st.columns(2)
        with col1:
            export_df = prepare_export_data(dataset, CITIES)
            st.download_button(
                label="📊 CPIデータCSV",
                data=export_df.to_csv(index=False),
                file_name=f"bolivia_cpi_data_{dataset.most_recent_date}.csv",
                mime="text/csv"
            )
        with col2:
            st.download_button(
                label="📄 算出方法",
                data=build_methodology_text(CITIES, DEFAULT_BASKET),
                file_name="bolivia_cpi_methodology.txt",
                mime="text/plain"
            )


def render_methodology():
    """算出方法の説明"""
    with st.expander("ℹ️ 算出方法"):
        st.markdown(
            "Hipermaxi の日次価格データ（サンタクルス・ラパス・コチャバンバ）から、"
            "以下の4ステップで合成CPIを算出しています。\n\n"
            "1. **カテゴリ対応付け**: 商品をスーパーのカテゴリから公式CPIカテゴリに対応付け（対象外は除外）\n"
            "2. **幾何平均**: 日付×カテゴリごとに価格の幾何平均 exp(mean(log p)) を計算\n"
            "3. **加重バスケット**: 公式ウェイトで加重したバスケット価格を最初の有効日 = 100 として指数化\n"
            "4. **全国指数**: 都市ウェイトによる加重平均"
        )
        weights = pd.DataFrame(
            [{'都市': c.name, 'ウェイト(%)': round(c.weight * 100, 2)} for c in CITIES]
        )
        st.dataframe(weights)


def main():
    """メイン関数"""
    configure_logging()
    configure_page()

    view, show_error_dates, show_mom = render_sidebar()

    st.title("📊 Bolivia CPI Tracker")
    st.markdown("**Synthetic Consumer Price Index from daily supermarket prices**")

    try:
        with st.spinner("🔄 価格データを読み込み中..."):
            dataset = load_dataset()
    except CPIDataError as e:
        st.error(f"⚠️ データを読み込めませんでした: {e}")
        st.caption("GitHub API のレート制限がかかっている可能性があります。")
        st.stop()

    for message in dataset.messages:
        st.warning(message)

    render_metrics(dataset)

    if view == "📈 全国・都市別推移":
        render_trend_view(dataset, show_error_dates, show_mom)
    elif view == "📊 カテゴリ寄与度":
        render_contribution_view(dataset)

    render_export_section(dataset)
    render_methodology()

    # フッター
    st.markdown("---")
    st.markdown(
        "<div style='text-align: center; color: #666;'>"
        f"© {datetime.now().year} Bolivia CPI Tracker | Data: mauforonda/precios | Powered by Streamlit"
        "</div>",
        unsafe_allow_html=True
    )


if __name__ == "__main__":
    main()
