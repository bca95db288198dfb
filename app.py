# app.py: Pelada Sagaz
# Elenco, jogos, artilharia, campeonatos e caixa da pelada, com acesso por papel:
#   viewer      -> início e artilharia
#   mensalista  -> + financeiro (somente leitura)
#   admin       -> tudo (cadastros, lançamentos, usuários)
# PELADA_DEMO=1 roda com dados em memória e sem login.

import logging
from datetime import date

import streamlit as st
import pandas as pd

from config import APP_NAME, is_demo, setup_logging, get_secret
from models import (
    POSITIONS, RUNNING, GAME_TYPES, TRANSACTION_TYPES, ROLES,
    POSITION_LABELS, RUNNING_LABELS, GAME_TYPE_LABELS, TRANSACTION_LABELS, ROLE_LABELS,
)
from access import can_access, visible_pages
from periods import generate_quarter_periods, find_period, game_range
from stats import (
    top_scorers, balance_summary, championship_ranking, championship_years,
    scorers_table, ranking_table, transactions_table, brl,
)
from sorteio import generate_balanced_teams, team_rating
from db import init_db
from db_users import AuthManager
from repositorio import SqlRepositorio, MemoriaRepositorio, carregar_snapshot, import_players_df
from ia_lista import processar_lista, parse_lista_local, IAListaError
from export import to_xlsx_bytes, build_ranking_pdf_bytes, HAS_RL

setup_logging()
logger = logging.getLogger(__name__)

st.set_page_config(page_title=f"⚽ {APP_NAME}", page_icon="⚽", layout="wide")


@st.cache_resource
def _auth():
    return AuthManager()


@st.cache_resource
def _engine():
    return init_db()


def get_repo():
    if is_demo():
        # um repositório por sessão; nada é compartilhado entre abas
        if "demo_repo" not in st.session_state:
            st.session_state["demo_repo"] = MemoriaRepositorio(seed=True)
        return st.session_state["demo_repo"]
    return SqlRepositorio(_engine())


def _fmt_game(g):
    return f"{g.date.strftime('%d/%m/%Y')} - {GAME_TYPE_LABELS.get(g.type, g.type)}"


def _fail(msg, e):
    logger.exception(msg)
    st.error(f"{msg}: {e}")


# -----------------------------------------------------------------------------------
#  LOGIN / LOGOUT + AUTOLOGIN POR TOKEN (?t=...)
# -----------------------------------------------------------------------------------
def _login_view(auth):
    st.title(f"⚽ {APP_NAME} — Login")

    token_in = st.query_params.get("t")
    if token_in and "auth_user" not in st.session_state:
        email = auth.token_get_email(str(token_in))
        if email:
            st.session_state["auth_user"] = email
            st.rerun()

    tab_login, tab_signup, tab_req = st.tabs(["Entrar", "Criar conta", "Solicitar acesso"])

    with tab_login:
        e = st.text_input("E-mail", key="login_email")
        p = st.text_input("Senha", type="password", key="login_pass")
        remember = st.checkbox("Lembrar-me (link de acesso rápido por 30 dias)", value=True, key="remember_me")
        if st.button("Entrar", type="primary", key="btn_login"):
            user = auth.authenticate(e, p)
            if not user:
                st.error("E-mail ou senha incorretos.")
            else:
                st.session_state["auth_user"] = user["email"]
                if remember:
                    st.query_params.update({"t": auth.token_insert(user["email"])})
                logger.info("login: %s", user["email"])
                st.rerun()

    with tab_signup:
        n2 = st.text_input("Nome", key="signup_name")
        e2 = st.text_input("E-mail", key="signup_email")
        p1 = st.text_input("Senha", type="password", key="signup_p1")
        p2 = st.text_input("Confirmar senha", type="password", key="signup_p2")
        if st.button("Criar conta", key="btn_signup"):
            if p1 != p2:
                st.error("As senhas não conferem.")
            else:
                ok, err = auth.create_user(n2, e2, p1)
                if ok:
                    st.success("Conta criada! Já pode entrar na aba 'Entrar'.")
                else:
                    st.error(err or "Não foi possível criar a conta.")

    with tab_req:
        st.caption("Peça acesso de mensalista ou administrador; um admin aprova.")
        n3 = st.text_input("Nome", key="req_name")
        e3 = st.text_input("E-mail", key="req_email")
        r3 = st.selectbox("Acesso desejado", ROLES, format_func=lambda r: ROLE_LABELS[r], key="req_role")
        if st.button("Enviar solicitação", key="btn_request"):
            ok, err = auth.create_account_request(n3, e3, r3)
            if ok:
                st.success("Solicitação enviada! Crie sua conta com o mesmo e-mail após a aprovação.")
            else:
                st.error(err)


def current_user(auth):
    if is_demo():
        return {"id": 0, "name": "Admin (demo)", "email": "demo@pelada", "role": "admin"}
    email = st.session_state.get("auth_user")
    return auth.get_user(email) if email else None


def _logout(auth, user):
    auth.token_delete_user(user["email"])
    st.session_state.pop("auth_user", None)
    st.query_params.clear()
    st.rerun()


# -----------------------------------------------------------------------------------
#  PÁGINAS
# -----------------------------------------------------------------------------------
def page_inicio(repo, snap, user):
    st.title(f"⚽ {repo.get_setting('league_name', APP_NAME)}")
    st.caption("Gerencie suas peladas, acompanhe estatísticas e organize seus jogadores!")

    cols = st.columns(2)
    with cols[0]:
        st.markdown("### ⚽ Artilharia — top 3")
        top3 = top_scorers(snap.goals, snap.games, snap.players)[:3]
        if not top3:
            st.info("Nenhum gol registrado ainda.")
        for i, s in enumerate(top3, start=1):
            st.write(f"**{i}º** {s.player.name} — {s.goals} gols")
    if can_access(user["role"], "financeiro"):
        with cols[1]:
            st.markdown("### 💰 Financeiro")
            st.metric("Saldo do caixa", brl(balance_summary(snap.transactions).balance))


def page_artilharia(repo, snap, user):
    st.title("⚽ Artilharia")

    periods = generate_quarter_periods(snap.games)
    opts = ["all"] + [p.id for p in periods] + ["game"]
    labels = {"all": "Todo o período", "game": "Jogo específico", **{p.id: p.label for p in periods}}

    c1, c2, c3 = st.columns(3)
    sel = c1.selectbox("Período", opts, format_func=lambda k: labels[k], key="art_period")
    gtype = c2.selectbox("Tipo de jogo", ["all"] + list(GAME_TYPES),
                         format_func=lambda k: "Todos" if k == "all" else GAME_TYPE_LABELS[k], key="art_type")

    period, game_id, desc = None, None, labels[sel]
    if sel == "game":
        if not snap.games:
            st.info("Nenhum jogo cadastrado.")
            return
        g = c3.selectbox("Jogo", snap.games, format_func=_fmt_game, key="art_game")
        period, game_id, desc = game_range(g), g.id, _fmt_game(g)
    elif sel != "all":
        period = find_period(periods, sel)

    scorers = top_scorers(snap.goals, snap.games, snap.players, period=period,
                          game_type=None if gtype == "all" else gtype, game_id=game_id)
    st.subheader(f"Artilheiros — {desc}")
    if not scorers:
        st.info("Nenhum gol registrado para este período.")
        return

    best = scorers[0]
    m1, m2 = st.columns([1, 3])
    if best.player.photo:
        m1.image(best.player.photo, width=96)
    m2.metric(f"🥇 {best.player.name}", f"{best.goals} gols")

    table = scorers_table(scorers)
    st.dataframe(table, use_container_width=True, hide_index=True)

    d1, d2 = st.columns(2)
    d1.download_button("⬇️ Excel", data=to_xlsx_bytes(table, "Artilharia"),
                       file_name="artilharia.xlsx",
                       mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", key="dl_art_xlsx")
    if HAS_RL:
        pdf = build_ranking_pdf_bytes(f"{APP_NAME} — Artilharia", desc, [("Artilheiros", table)])
        d2.download_button("📄 PDF", data=pdf, file_name="artilharia.pdf", mime="application/pdf", key="dl_art_pdf")


def page_financeiro(repo, snap, user):
    st.title("💰 Financeiro")
    summary = balance_summary(snap.transactions)
    c1, c2, c3 = st.columns(3)
    c1.metric("Entradas", brl(summary.total_in))
    c2.metric("Saídas", brl(summary.total_out))
    c3.metric("Saldo", brl(summary.balance))
    if summary.balance < 0:
        st.warning("Caixa no negativo.")

    if can_access(user["role"], "financeiro.editar"):
        with st.form("form_transaction", clear_on_submit=True):
            st.markdown("#### ➕ Nova transação")
            f1, f2, f3 = st.columns(3)
            tdate = f1.date_input("Data", value=date.today(), format="DD/MM/YYYY")
            ttype = f2.selectbox("Tipo", TRANSACTION_TYPES, format_func=lambda t: TRANSACTION_LABELS[t])
            amount = f3.number_input("Valor (R$)", min_value=0.0, step=1.0, value=0.0)
            desc = st.text_input("Descrição", placeholder="Ex.: Mensalidade, Aluguel do campo, Bolas")
            if st.form_submit_button("Salvar transação"):
                if not desc.strip():
                    st.warning("Informe a descrição.")
                else:
                    try:
                        repo.create_transaction(tdate, ttype, amount, desc)
                        st.success("Transação adicionada com sucesso!")
                        st.rerun()
                    except ValueError as e:
                        st.warning(str(e))
                    except Exception as e:
                        _fail("Erro ao salvar transação", e)

    st.markdown("### Transações")
    table = transactions_table(snap.transactions)
    if table.empty:
        st.info("Nenhuma transação registrada.")
        return
    show = table.copy()
    show["Valor"] = show["Valor"].map(brl)
    st.dataframe(show, use_container_width=True, hide_index=True)
    st.download_button("⬇️ Excel", data=to_xlsx_bytes(table, "Caixa"), file_name="caixa.xlsx",
                       mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet", key="dl_fin_xlsx")

    if can_access(user["role"], "financeiro.editar"):
        st.divider()
        by_id = {t.id: t for t in snap.transactions}
        to_del = st.multiselect(
            "Selecionar transações para excluir", options=list(by_id),
            format_func=lambda i: f"{by_id[i].date.strftime('%d/%m/%Y')} · {by_id[i].description} · {brl(by_id[i].signed_amount)}",
            key="fin_del",
        )
        if st.button("🗑 Excluir selecionadas", key="btn_fin_del") and to_del:
            for i in to_del:
                repo.delete_transaction(i)
            st.success("Transações excluídas.")
            st.rerun()

        confirm = st.checkbox("Confirmo que quero remover TODAS as transações (não pode ser desfeito)", key="fin_clear_ok")
        if st.button("Limpar transações", type="secondary", disabled=not confirm, key="btn_fin_clear"):
            n = repo.clear_transactions()
            st.success(f"Todas as transações foram removidas! ({n})")
            st.rerun()


def _player_form(prefix, player=None):
    c1, c2 = st.columns(2)
    name = c1.text_input("Nome", value=player.name if player else "", key=f"{prefix}_name")
    photo = c2.text_input("Foto (URL, opcional)", value=(player.photo or "") if player else "", key=f"{prefix}_photo")
    c3, c4, c5 = st.columns(3)
    position = c3.selectbox("Posição", POSITIONS, index=POSITIONS.index(player.position) if player else 3,
                            format_func=lambda p: POSITION_LABELS[p], key=f"{prefix}_pos")
    running = c4.selectbox("Corre?", RUNNING, index=RUNNING.index(player.running) if player else 2,
                           format_func=lambda r: RUNNING_LABELS[r], key=f"{prefix}_run")
    rating = c5.slider("Nota", min_value=0.0, max_value=10.0, step=0.1,
                       value=float(player.rating) if player else 5.0, key=f"{prefix}_rating")
    return {"name": name, "position": position, "running": running, "rating": rating, "photo": photo.strip() or None}


def page_jogadores(repo, snap, user):
    st.title("👤 Jogadores")
    tab_list, tab_new, tab_edit, tab_imp = st.tabs(["Elenco", "Cadastrar", "Editar/Excluir", "Importar"])

    with tab_list:
        if not snap.players:
            st.info("Cadastre jogadores primeiro.")
        else:
            df = pd.DataFrame([{
                "Nome": p.name, "Posição": POSITION_LABELS[p.position],
                "Corre?": RUNNING_LABELS[p.running], "Nota": p.rating,
            } for p in snap.players])
            st.dataframe(df, use_container_width=True, hide_index=True)

    with tab_new:
        with st.form("form_player_new", clear_on_submit=True):
            fields = _player_form("new")
            if st.form_submit_button("Salvar jogador"):
                try:
                    repo.create_player(**fields)
                    st.success("Jogador salvo!")
                    st.rerun()
                except ValueError as e:
                    st.warning(str(e))
                except Exception as e:
                    _fail("Erro ao salvar jogador", e)

    with tab_edit:
        if snap.players:
            by_id = {p.id: p for p in snap.players}
            pid = st.selectbox("Jogador", list(by_id), format_func=lambda i: by_id[i].name, key="edit_pid")
            with st.form(f"form_player_edit_{pid}"):
                fields = _player_form(f"edit_{pid}", by_id[pid])
                if st.form_submit_button("Salvar alterações"):
                    try:
                        repo.update_player(pid, **fields)
                        st.success("Jogador atualizado!")
                        st.rerun()
                    except ValueError as e:
                        st.warning(str(e))
                    except Exception as e:
                        _fail("Erro ao atualizar jogador", e)
            if st.button("🗑 Excluir jogador", key=f"del_player_{pid}"):
                repo.delete_player(pid)
                st.success("Jogador excluído. Os gols dele deixam de aparecer na artilharia.")
                st.rerun()

    with tab_imp:
        tpl = pd.DataFrame({
            "Nome": ["Fulano da Silva", "Beltrano Souza"],
            "Posição": ["atacante", "defensor"],
            "Corrida": ["sim", "medio"],
            "Nota": [7.5, 6],
            "Foto": ["", ""],
        })
        t1, t2 = st.columns(2)
        t1.download_button("⬇️ Modelo CSV (jogadores)", data=tpl.to_csv(index=False).encode("utf-8"),
                           file_name="modelo_jogadores.csv", mime="text/csv", key="tpl_players_csv")
        t2.download_button("⬇️ Modelo Excel (jogadores)", data=to_xlsx_bytes(tpl, "Jogadores"),
                           file_name="modelo_jogadores.xlsx",
                           mime="application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
                           key="tpl_players_xlsx")
        up = st.file_uploader("Upload CSV/XLSX de jogadores", type=["csv", "xlsx", "xls"], key="players_import")
        if up is not None and st.button("Importar", key="btn_import_players"):
            try:
                dfimp = pd.read_excel(up) if up.name.lower().endswith((".xlsx", ".xls")) else pd.read_csv(up)
                res = import_players_df(repo, dfimp)
                st.success(f"Importação concluída. Linhas lidas: {res['linhas']} · Gravadas/atualizadas: {res['gravadas']}")
                for err in res["erros"]:
                    st.warning(err)
            except Exception as e:
                _fail("Erro ao importar jogadores", e)


def page_jogos(repo, snap, user):
    st.title("📆 Jogos")
    tab_list, tab_new, tab_goals, tab_draw = st.tabs(["Jogos", "Novo jogo", "Lançar gols", "Sorteio de times"])
    players_by_id = {p.id: p for p in snap.players}

    with tab_list:
        if not snap.games:
            st.info("Nenhum jogo cadastrado.")
        else:
            goals_per_game = {}
            for g in snap.goals:
                goals_per_game[g.game_id] = goals_per_game.get(g.game_id, 0) + g.count
            df = pd.DataFrame([{
                "Data": g.date.strftime("%d/%m/%Y"), "Tipo": GAME_TYPE_LABELS[g.type],
                "Gols": goals_per_game.get(g.id, 0),
            } for g in snap.games])
            st.dataframe(df, use_container_width=True, hide_index=True)

            games_by_id = {g.id: g for g in snap.games}
            gid = st.selectbox("Detalhes do jogo", list(games_by_id), format_func=lambda i: _fmt_game(games_by_id[i]),
                               key="game_detail")
            present = repo.game_players(gid)
            st.caption("Presentes: " + (", ".join(p.name for p in present) if present else "—"))
            with st.form(f"form_game_edit_{gid}"):
                e1, e2 = st.columns(2)
                new_date = e1.date_input("Data", value=games_by_id[gid].date, format="DD/MM/YYYY")
                new_type = e2.selectbox("Tipo", GAME_TYPES, index=GAME_TYPES.index(games_by_id[gid].type),
                                        format_func=lambda t: GAME_TYPE_LABELS[t])
                new_present = st.multiselect("Presentes", list(players_by_id), default=[p.id for p in present
                                                                                       if p.id in players_by_id],
                                             format_func=lambda i: players_by_id[i].name)
                if st.form_submit_button("Salvar jogo"):
                    try:
                        repo.update_game(gid, date=new_date, type=new_type)
                        repo.set_game_players(gid, new_present)
                        st.success("Jogo atualizado!")
                        st.rerun()
                    except Exception as e:
                        _fail("Erro ao atualizar jogo", e)
            if st.button("🗑 Excluir jogo (e seus gols)", key=f"del_game_{gid}"):
                repo.delete_game(gid)
                st.success("Jogo excluído.")
                st.rerun()

    with tab_new:
        with st.form("form_game_new", clear_on_submit=True):
            c1, c2 = st.columns(2)
            gdate = c1.date_input("Data do jogo", value=date.today(), format="DD/MM/YYYY")
            gtype = c2.selectbox("Tipo", GAME_TYPES, format_func=lambda t: GAME_TYPE_LABELS[t])
            present = st.multiselect("Jogadores presentes", list(players_by_id),
                                     format_func=lambda i: players_by_id[i].name,
                                     placeholder="Digite o nome e tecle Enter")
            photo = st.text_input("Foto (URL, opcional)")
            if st.form_submit_button("Criar jogo"):
                try:
                    g = repo.create_game(gdate, gtype, player_ids=present, photo=photo.strip() or None)
                    st.success(f"Jogo criado: {_fmt_game(g)} com {len(present)} presentes.")
                except Exception as e:
                    _fail("Erro ao criar jogo", e)

    with tab_goals:
        if not snap.games:
            st.info("Cadastre um jogo primeiro.")
        else:
            games_by_id = {g.id: g for g in snap.games}
            gid = st.selectbox("Jogo", list(games_by_id), format_func=lambda i: _fmt_game(games_by_id[i]),
                               key="goals_game")
            present = repo.game_players(gid) or snap.players
            search = st.text_input("Buscar jogador", key=f"goals_search_{gid}").strip().casefold()
            shown = [p for p in present if search in p.name.casefold()]
            entries = {}
            cols = st.columns(3)
            for i, p in enumerate(shown):
                entries[p.id] = cols[i % 3].number_input(p.name, min_value=0, step=1, value=0,
                                                         key=f"goal_{gid}_{p.id}")
            if st.button("💾 Salvar gols", key=f"save_goals_{gid}"):
                try:
                    n = 0
                    for pid, c in entries.items():
                        if c > 0:
                            repo.add_goal(gid, pid, int(c))
                            n += 1
                    st.success(f"Gols salvos para {n} jogador(es)!")
                except Exception as e:
                    _fail("Erro ao salvar gols", e)

    with tab_draw:
        sel = st.multiselect("Jogadores", list(players_by_id), format_func=lambda i: players_by_id[i].name,
                             key="draw_players")
        n_teams = st.number_input("Quantidade de times", min_value=2, max_value=8, step=1, value=2, key="draw_n")
        if st.button("🎲 Sortear times", key="btn_draw"):
            if len(sel) < int(n_teams):
                st.warning("Selecione pelo menos um jogador por time.")
            else:
                teams = generate_balanced_teams([players_by_id[i] for i in sel], int(n_teams))
                cols = st.columns(len(teams))
                for idx, team in enumerate(teams):
                    with cols[idx]:
                        st.markdown(f"**Time {idx+1}** · nota {team_rating(team)}")
                        for p in team:
                            st.write(("🛡 " if p.position == "defensor" else "• ") + p.name)


def page_campeonatos(repo, snap, user):
    st.title("🏆 Campeonatos")
    years = championship_years(snap.championships) or [date.today().year]
    year = st.selectbox("Ano", years, key="champ_year")

    ranking = championship_ranking(snap.championships, snap.players, year)
    st.subheader(f"Ranking de campeões — {year}")
    table = ranking_table(ranking)
    if table.empty:
        st.info("Nenhum título registrado neste ano.")
    else:
        st.dataframe(table, use_container_width=True, hide_index=True)

    st.divider()
    players_by_id = {p.id: p for p in snap.players}
    games_by_id = {g.id: g for g in snap.games if g.type == "campeonato"}
    if not players_by_id:
        st.info("Cadastre jogadores primeiro.")
        return
    with st.form("form_champ_new", clear_on_submit=True):
        st.markdown("#### ➕ Registrar título")
        c1, c2 = st.columns(2)
        pid = c1.selectbox("Jogador", list(players_by_id), format_func=lambda i: players_by_id[i].name)
        gid = c2.selectbox("Jogo (opcional)", [""] + list(games_by_id),
                           format_func=lambda i: "—" if not i else _fmt_game(games_by_id[i]))
        c3, c4 = st.columns(2)
        cyear = c3.number_input("Ano", min_value=1900, max_value=2100, step=1, value=int(year))
        cdate = c4.date_input("Data", value=date.today(), format="DD/MM/YYYY")
        st.caption("Com jogo selecionado, ano e data vêm do jogo.")
        if st.form_submit_button("Salvar título"):
            try:
                if gid:
                    repo.create_championship(pid, game_id=gid)
                else:
                    repo.create_championship(pid, year=int(cyear), date=cdate)
                st.success("Título registrado!")
                st.rerun()
            except ValueError as e:
                st.warning(str(e))
            except Exception as e:
                _fail("Erro ao registrar título", e)

    champs = [c for c in snap.championships if c.year == int(year)]
    if champs:
        by_id = {c.id: c for c in champs}
        del_id = st.selectbox(
            "Excluir título", [""] + list(by_id),
            format_func=lambda i: "—" if not i else
            f"{players_by_id[by_id[i].player_id].name if by_id[i].player_id in players_by_id else '?'} · {by_id[i].date.strftime('%d/%m/%Y')}",
            key="champ_del",
        )
        if del_id and st.button("🗑 Excluir", key="btn_champ_del"):
            repo.delete_championship(del_id)
            st.rerun()


def page_alimentacao(repo, snap, user):
    st.title("🤖 Alimentação Inteligente")
    st.caption("Cole a lista do jogo (ex.: do WhatsApp). Cada ⚽ ou 🥅 antes do nome conta um gol.")
    texto = st.text_area("Lista do jogo", height=220, key="ia_text")

    c1, c2 = st.columns(2)
    has_key = bool(get_secret("AI_API_KEY", ""))
    if c1.button("Processar com IA", disabled=not has_key or not texto.strip(), key="btn_ia"):
        try:
            st.session_state["ia_result"] = processar_lista(texto, snap.players)
        except IAListaError as e:
            logger.error("falha ao processar lista com IA (%s): %s", e.status, e)
            st.error(str(e))
    if c2.button("Leitura rápida (sem IA)", disabled=not texto.strip(), key="btn_local"):
        st.session_state["ia_result"] = parse_lista_local(texto, snap.players)
    if not has_key:
        st.caption("Configure AI_API_KEY para usar a IA.")

    res = st.session_state.get("ia_result")
    if not res:
        return
    st.markdown(f"**{res.matched_count}** de **{res.total_players}** jogadores identificados.")
    st.dataframe(pd.DataFrame([{
        "No texto": p.original_name, "Jogador": p.matched_name if p.player_id else "— não encontrado —",
        "Confiança": p.confidence, "Gols": p.goals,
    } for p in res.players]), use_container_width=True, hide_index=True)

    with st.form("form_ia_confirm"):
        f1, f2 = st.columns(2)
        gdate = f1.date_input("Data do jogo", value=res.date or date.today(), format="DD/MM/YYYY")
        gtype = f2.selectbox("Tipo", GAME_TYPES, index=GAME_TYPES.index(res.game_type),
                             format_func=lambda t: GAME_TYPE_LABELS[t])
        if st.form_submit_button("Criar jogo com presenças e gols"):
            matched = [p for p in res.players if p.player_id]
            try:
                g = repo.create_game(gdate, gtype, player_ids=[p.player_id for p in matched])
                for p in matched:
                    if p.goals > 0:
                        repo.add_goal(g.id, p.player_id, p.goals)
                st.session_state.pop("ia_result", None)
                st.success(f"Jogo {_fmt_game(g)} criado com {len(matched)} presentes.")
            except Exception as e:
                _fail("Erro ao criar jogo a partir da lista", e)


def page_admin(repo, snap, user, auth):
    st.title("🛠 Administração")
    tab_cfg, tab_users, tab_reqs, tab_dates = st.tabs(["Configurações", "Usuários", "Solicitações", "Corrigir datas"])

    with tab_cfg:
        with st.form("form_settings"):
            ln = st.text_input("Nome da Pelada", value=repo.get_setting("league_name", APP_NAME))
            if st.form_submit_button("Salvar configurações"):
                repo.set_setting("league_name", ln.strip() or APP_NAME)
                st.success("Configurações salvas!")

    if auth is None:
        for t in (tab_users, tab_reqs):
            with t:
                st.info("Usuários não estão disponíveis no modo demonstração.")
    else:
        with tab_users:
            users = auth.list_users()
            if users.empty:
                st.info("Nenhum usuário.")
            else:
                show = users.rename(columns={"name": "Nome", "email": "E-mail", "role": "Papel", "created_at": "Criado em"})
                show["Papel"] = show["Papel"].map(lambda r: ROLE_LABELS.get(r, r))
                st.dataframe(show.drop(columns=["id"]), use_container_width=True, hide_index=True)

                ids = users["id"].astype(int).tolist()
                names = {int(r["id"]): f"{r['name']} <{r['email']}>" for _, r in users.iterrows()}
                uid = st.selectbox("Usuário", ids, format_func=lambda i: names[i], key="adm_uid")
                c1, c2 = st.columns(2)
                with c1:
                    new_role = st.selectbox("Papel", ROLES, format_func=lambda r: ROLE_LABELS[r], key=f"adm_role_{uid}")
                    if st.button("Atualizar papel", key=f"btn_role_{uid}"):
                        auth.update_role(uid, new_role)
                        st.success("Papel atualizado.")
                        st.rerun()
                    if uid != user["id"] and st.button("🗑 Excluir usuário", key=f"btn_del_user_{uid}"):
                        auth.delete_user(uid)
                        st.success("Usuário excluído.")
                        st.rerun()
                with c2:
                    pw = st.text_input("Nova senha", type="password", key=f"adm_pw_{uid}")
                    if st.button("Redefinir senha", key=f"btn_pw_{uid}"):
                        ok, err = auth.reset_password(uid, pw)
                        if ok:
                            st.success("Senha atualizada.")
                        else:
                            st.error(err)

        with tab_reqs:
            reqs = auth.list_account_requests()
            if reqs.empty:
                st.info("Nenhuma solicitação.")
            else:
                st.dataframe(reqs.drop(columns=["id"]), use_container_width=True, hide_index=True)
                pend = reqs[reqs["status"] == "pending"]
                for _, r in pend.iterrows():
                    rid = int(r["id"])
                    c1, c2, c3 = st.columns([2, 1, 1])
                    c1.write(f"**{r['name']}** <{r['email']}>")
                    role = c2.selectbox("Papel", ROLES, index=ROLES.index(r["role"]) if r["role"] in ROLES else 0,
                                        format_func=lambda x: ROLE_LABELS[x], key=f"req_role_{rid}")
                    if c3.button("Aprovar", key=f"req_ok_{rid}"):
                        auth.approve_account_request(rid, role, user["email"])
                        st.rerun()
                    if c3.button("Negar", key=f"req_no_{rid}"):
                        auth.deny_account_request(rid, user["email"])
                        st.rerun()

    with tab_dates:
        st.caption("Move todos os jogos de uma data para outra (ex.: ano digitado errado).")
        with st.form("form_remap"):
            c1, c2 = st.columns(2)
            dfrom = c1.date_input("De", value=date.today(), format="DD/MM/YYYY")
            dto = c2.date_input("Para", value=date.today(), format="DD/MM/YYYY")
            if st.form_submit_button("Corrigir"):
                res = repo.remap_game_dates([{"from": dfrom, "to": dto}])
                st.success(f"{res[0]['updated']} jogo(s) atualizados.")


# -----------------------------------------------------------------------------------
#  MAIN
# -----------------------------------------------------------------------------------
def main():
    auth = None if is_demo() else _auth()
    if auth is not None and "auth_user" not in st.session_state:
        _login_view(auth)
        st.stop()

    user = current_user(auth)
    if not user:
        st.session_state.pop("auth_user", None)
        st.error("Usuário não encontrado. Entre novamente.")
        st.stop()

    repo = get_repo()
    pages = visible_pages(user["role"])

    with st.sidebar:
        st.markdown(f"## ⚽ {APP_NAME}")
        st.markdown(f"**👤 {user['name']}** · {ROLE_LABELS.get(user['role'], user['role'])}")
        page = st.radio("Menu", [k for k, _ in pages], format_func=dict(pages).get, key="page")
        if auth is not None:
            c1, c2 = st.columns(2)
            if c1.button("Sair", use_container_width=True, key="btn_logout"):
                _logout(auth, user)
            if c2.button("Link rápido", use_container_width=True, key="btn_fastlink"):
                st.query_params.update({"t": auth.token_insert(user["email"])})
                st.success("Link de acesso rápido gerado (30 dias). Adicione aos favoritos.")
        else:
            st.caption("Modo demonstração: dados em memória.")

    if not can_access(user["role"], page):
        st.error("Você não tem acesso a esta página.")
        st.stop()

    snap = carregar_snapshot(repo)
    if page == "admin":
        page_admin(repo, snap, user, auth)
    else:
        {
            "inicio": page_inicio,
            "artilharia": page_artilharia,
            "financeiro": page_financeiro,
            "jogadores": page_jogadores,
            "jogos": page_jogos,
            "campeonatos": page_campeonatos,
            "alimentacao": page_alimentacao,
        }[page](repo, snap, user)


main()
