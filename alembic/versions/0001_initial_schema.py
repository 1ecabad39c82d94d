"""Initial schema: users, agencies, candidates, CV analyses, tasks, agenda

Revision ID: 0001_initial_schema
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "0001_initial_schema"
down_revision = None
branch_labels = None
depends_on = None


def _timestamps():
    return [
        sa.Column("id", sa.UUID(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
    ]


def _uuid_array(name):
    return sa.Column(name, postgresql.ARRAY(sa.UUID()), server_default="{}", nullable=False)


def upgrade() -> None:
    op.create_table(
        "user",
        *_timestamps(),
        sa.Column("username", sa.String(length=100), nullable=False),
        sa.Column("hashed_password", sa.String(length=255), nullable=False),
        sa.Column("nome", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("telefone", sa.String(length=50), nullable=True),
        sa.Column("role", sa.String(length=50), nullable=False),
        sa.Column("departamento", sa.String(length=50), nullable=True),
        sa.Column("responsavel_id", sa.UUID(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("broker_equipa_id", sa.UUID(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="ativo", nullable=False),
        sa.Column("criado_por", sa.UUID(), nullable=True),
        sa.Column("atualizado_por", sa.UUID(), nullable=True),
        sa.Column("inativado_em", sa.DateTime(timezone=True), nullable=True),
        sa.Column("inativado_por", sa.UUID(), nullable=True),
        sa.Column("motivo_inativacao", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("username"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_user_created_at", "user", ["created_at"])
    op.create_index("ix_user_departamento", "user", ["departamento"])
    op.create_index("ix_user_broker_equipa_id", "user", ["broker_equipa_id"])
    op.create_index("ix_user_role_departamento", "user", ["role", "departamento"])

    op.create_table(
        "agency",
        *_timestamps(),
        sa.Column("nome", sa.String(length=255), nullable=False),
        sa.Column("manager_id", sa.UUID(), sa.ForeignKey("user.id"), nullable=False),
        _uuid_array("diretores"),
        _uuid_array("departamentos"),
        _uuid_array("employees"),
        sa.Column("status", sa.String(length=20), server_default="ativo", nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_agency_created_at", "agency", ["created_at"])

    op.create_table(
        "department",
        *_timestamps(),
        sa.Column("nome", sa.String(length=100), nullable=False),
        sa.Column("manager_id", sa.UUID(), sa.ForeignKey("user.id"), nullable=False),
        _uuid_array("agencias"),
        sa.Column("status", sa.String(length=20), server_default="ativo", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("nome"),
    )
    op.create_index("ix_department_created_at", "department", ["created_at"])

    op.create_table(
        "user_agency",
        *_timestamps(),
        sa.Column("user_id", sa.UUID(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("agencia_id", sa.UUID(), sa.ForeignKey("agency.id"), nullable=False),
        sa.Column("status", sa.String(length=20), server_default="ativo", nullable=False),
        sa.Column("data_associacao", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("associado_por", sa.UUID(), nullable=True),
        sa.Column("data_inativacao", sa.DateTime(timezone=True), nullable=True),
        sa.Column("inativado_por", sa.UUID(), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_user_agency_created_at", "user_agency", ["created_at"])
    op.create_index("ix_user_agency_user_id", "user_agency", ["user_id"])

    op.create_table(
        "candidate",
        *_timestamps(),
        sa.Column("nome", sa.String(length=255), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("telefone", sa.String(length=50), nullable=False),
        sa.Column("nif", sa.String(length=50), nullable=True),
        sa.Column("tipo_contato", sa.String(length=50), nullable=True),
        sa.Column("importancia", sa.String(length=50), nullable=True),
        sa.Column("origem_contato", sa.String(length=100), nullable=True),
        sa.Column("departamento", sa.String(length=50), nullable=True),
        sa.Column("agencia_id", sa.UUID(), sa.ForeignKey("agency.id"), nullable=True),
        sa.Column("skills", postgresql.ARRAY(sa.String()), server_default="{}", nullable=False),
        sa.Column("cidade", sa.String(length=100), nullable=True),
        sa.Column("distrito", sa.String(length=100), nullable=True),
        sa.Column("anos_experiencia", sa.Integer(), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="ativo", nullable=False),
        sa.Column("motivo_inativacao", sa.Text(), nullable=True),
        sa.Column("pipeline_status", sa.String(length=50), server_default="identificacao", nullable=False),
        sa.Column("metricas", postgresql.JSONB(astext_type=sa.Text()), server_default="{}", nullable=False),
        sa.Column("indicacao", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.Column("nivel_indicacao", sa.String(length=50), nullable=True),
        sa.Column("responsavel_indicacao", sa.UUID(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("criado_por", sa.UUID(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("version", sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_candidate_created_at", "candidate", ["created_at"])
    op.create_index("ix_candidate_email", "candidate", ["email"])
    op.create_index("ix_candidate_departamento", "candidate", ["departamento"])
    op.create_index("ix_candidate_pipeline_status", "candidate", ["pipeline_status"])
    op.create_index("ix_candidate_natural_key", "candidate", ["email", "telefone"])

    op.create_table(
        "candidate_responsible",
        *_timestamps(),
        sa.Column("candidate_id", sa.UUID(), sa.ForeignKey("candidate.id", ondelete="CASCADE"), nullable=False),
        sa.Column("user_id", sa.UUID(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("data_atribuicao", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("status", sa.String(length=20), server_default="ativo", nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("candidate_id", "user_id", name="uq_candidate_responsible"),
    )
    op.create_index("ix_candidate_responsible_created_at", "candidate_responsible", ["created_at"])
    op.create_index("ix_candidate_responsible_candidate_id", "candidate_responsible", ["candidate_id"])
    op.create_index("ix_candidate_responsible_user_id", "candidate_responsible", ["user_id"])

    op.create_table(
        "candidate_history",
        *_timestamps(),
        sa.Column("candidate_id", sa.UUID(), sa.ForeignKey("candidate.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tipo", sa.String(length=50), nullable=False),
        sa.Column("conteudo", sa.Text(), nullable=False),
        sa.Column("data", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("autor_id", sa.UUID(), sa.ForeignKey("user.id"), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_candidate_history_created_at", "candidate_history", ["created_at"])
    op.create_index("ix_candidate_history_candidate_id", "candidate_history", ["candidate_id"])

    op.create_table(
        "cv_analysis",
        *_timestamps(),
        sa.Column("candidato_id", sa.UUID(), sa.ForeignKey("candidate.id"), nullable=True),
        sa.Column("analise", sa.Text(), nullable=False),
        sa.Column("pontuacao", sa.Float(), nullable=True),
        sa.Column("classificacao", sa.String(length=100), nullable=True),
        sa.Column("status", sa.String(length=50), server_default="Em análise", nullable=False),
        sa.Column("dono_id", sa.UUID(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("departamento_dono", sa.String(length=50), nullable=True),
        sa.Column("analisado_por_id", sa.UUID(), sa.ForeignKey("user.id"), nullable=True),
        sa.Column("data_analise", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_cv_analysis_created_at", "cv_analysis", ["created_at"])
    op.create_index("ix_cv_analysis_candidato_id", "cv_analysis", ["candidato_id"])
    op.create_index("ix_cv_analysis_dono_id", "cv_analysis", ["dono_id"])
    op.create_index("ix_cv_analysis_departamento_dono", "cv_analysis", ["departamento_dono"])

    op.create_table(
        "task",
        *_timestamps(),
        sa.Column("titulo", sa.String(length=255), nullable=False),
        sa.Column("descricao", sa.Text(), nullable=False),
        sa.Column("data", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("prazo", sa.DateTime(timezone=True), nullable=True),
        sa.Column("status", sa.String(length=50), server_default="Pendente", nullable=False),
        sa.Column("criador_id", sa.UUID(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("destinatario_id", sa.UUID(), sa.ForeignKey("user.id"), nullable=True),
        _uuid_array("responsaveis"),
        _uuid_array("acompanhantes"),
        sa.Column("departamento", sa.String(length=50), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_task_created_at", "task", ["created_at"])
    op.create_index("ix_task_prazo", "task", ["prazo"])
    op.create_index("ix_task_criador_id", "task", ["criador_id"])
    op.create_index("ix_task_departamento", "task", ["departamento"])

    op.create_table(
        "appointment",
        *_timestamps(),
        sa.Column("titulo", sa.String(length=255), nullable=False),
        sa.Column("descricao", sa.Text(), nullable=True),
        sa.Column("data", sa.String(length=10), nullable=False),
        sa.Column("horario", sa.String(length=5), nullable=False),
        _uuid_array("participantes"),
        sa.Column("tipo", sa.String(length=20), server_default="outro", nullable=False),
        sa.Column("local", sa.String(length=255), nullable=True),
        sa.Column("status", sa.String(length=20), server_default="pendente", nullable=False),
        sa.Column("organizador_id", sa.UUID(), sa.ForeignKey("user.id"), nullable=False),
        sa.Column("historico", postgresql.JSONB(astext_type=sa.Text()), server_default="[]", nullable=False),
        sa.Column("google_calendar_event_id", sa.String(length=255), nullable=True),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_appointment_created_at", "appointment", ["created_at"])
    op.create_index("ix_appointment_status", "appointment", ["status"])
    op.create_index("ix_appointment_organizador_id", "appointment", ["organizador_id"])
    op.create_index("ix_appointment_data_horario", "appointment", ["data", "horario"])

    op.create_table(
        "notification",
        *_timestamps(),
        sa.Column("user_id", sa.UUID(), sa.ForeignKey("user.id", ondelete="CASCADE"), nullable=False),
        sa.Column("tipo", sa.String(length=50), nullable=False),
        sa.Column("conteudo", sa.Text(), nullable=False),
        sa.Column("data", sa.DateTime(timezone=True), server_default=sa.text("now()"), nullable=False),
        sa.Column("lida", sa.Boolean(), server_default=sa.false(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_notification_created_at", "notification", ["created_at"])
    op.create_index("ix_notification_user_id", "notification", ["user_id"])


def downgrade() -> None:
    op.drop_table("notification")
    op.drop_table("appointment")
    op.drop_table("task")
    op.drop_table("cv_analysis")
    op.drop_table("candidate_history")
    op.drop_table("candidate_responsible")
    op.drop_table("candidate")
    op.drop_table("user_agency")
    op.drop_table("department")
    op.drop_table("agency")
    op.drop_table("user")
